"""
Top-level package for the WordPress course-content sync utility.

This package bundles the components required to parse a LearnDash
course export, reconcile it against the live course database and fill
in missing module descriptions, lesson text and lesson videos.  Modules
are split into subpackages:

* :mod:`course_sync.extractors` – tolerant scanning of the export document
* :mod:`course_sync.parsers` – content normalization and media extraction
* :mod:`course_sync.matchers` – title normalization and hierarchical matching
* :mod:`course_sync.reconcilers` – safe-to-backfill decisions
* :mod:`course_sync.stores` – the DuckDB-backed content store
* :mod:`course_sync.utils` – error types and JSON Lines reports

Each layer has no direct knowledge of configuration or execution
strategy; orchestration is handled in :mod:`course_sync.sync_tool`.
"""
