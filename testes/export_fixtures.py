"""Builders for small LearnDash export documents used across the tests."""


def wp_item(post_id, post_type, title, content="", course_id=None, lesson_id=None):
    meta = ""
    for key, value in (("course_id", course_id), ("lesson_id", lesson_id)):
        if value is not None:
            meta += (
                "\n\t\t<wp:postmeta>\n"
                f"\t\t\t<wp:meta_key><![CDATA[{key}]]></wp:meta_key>\n"
                f"\t\t\t<wp:meta_value><![CDATA[{value}]]></wp:meta_value>\n"
                "\t\t</wp:postmeta>"
            )
    return (
        "\t<item>\n"
        f"\t\t<title><![CDATA[{title}]]></title>\n"
        f"\t\t<content:encoded><![CDATA[{content}]]></content:encoded>\n"
        f"\t\t<wp:post_id>{post_id}</wp:post_id>\n"
        f"\t\t<wp:post_type><![CDATA[{post_type}]]></wp:post_type>"
        f"{meta}\n"
        "\t</item>\n"
    )


def wp_export(*items):
    return (
        '<?xml version="1.0" encoding="UTF-8" ?>\n'
        '<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/" '
        'xmlns:wp="http://wordpress.org/export/1.2/">\n'
        "<channel>\n<title>Music School</title>\n"
        + "".join(items)
        + "</channel>\n</rss>\n"
    )


def course(post_id, title):
    return wp_item(post_id, "sfwd-courses", title)


def module(post_id, title, course_id, content=""):
    return wp_item(post_id, "sfwd-lessons", title, content, course_id=course_id)


def lesson(post_id, title, course_id, module_id=None, content=""):
    return wp_item(post_id, "sfwd-topic", title, content, course_id=course_id, lesson_id=module_id)
