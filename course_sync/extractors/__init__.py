"""
Extractors for WordPress course export files.

This subpackage provides functions to scan a LearnDash XML export into
typed raw records and into the parsed module/lesson representation the
matcher and planner work on.
"""
