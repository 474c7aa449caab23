"""
Role tags: the officer and subject-helper registries, per-student titles
and the usage counters that go with them.

A student's titles hold full labels. Officer labels are the tag itself,
subject helper labels carry config.TEACHER_SUFFIX ("數學" -> "數學小老師").
Usage counters are keyed by the bare tag.
"""

import logging
from collections import Counter
from dataclasses import replace

from seat_chart import config
from seat_chart.models import TagType, TitleCursor

logger = logging.getLogger(__name__)

_FIELDS = {
    TagType.OFFICER: ("officer_tags", "custom_officer_tags", "officer_tags_usage"),
    TagType.TEACHER: ("teacher_tags", "custom_teacher_tags", "teacher_tags_usage"),
}


def full_tag(tag, tag_type):
    tag_type = TagType(tag_type)
    return tag + config.TEACHER_SUFFIX if tag_type is TagType.TEACHER else tag


def split_tag(label):
    if label.endswith(config.TEACHER_SUFFIX):
        return label[: -len(config.TEACHER_SUFFIX)], TagType.TEACHER
    return label, TagType.OFFICER


def title_tag(data, label):
    """Tag and type behind a held title.

    An officer tag may itself end with the helper suffix, so the officer
    registry is consulted before the suffix.
    """
    if label in data.officer_tags:
        return label, TagType.OFFICER
    return split_tag(label)


def _collides(data, tag_type, label):
    if tag_type is TagType.OFFICER:
        tag, kind = split_tag(label)
        return kind is TagType.TEACHER and tag in data.teacher_tags
    return full_tag(label, tag_type) in data.officer_tags


def tag_list(data, tag_type):
    return getattr(data, _FIELDS[TagType(tag_type)][0])


def custom_tag_list(data, tag_type):
    return getattr(data, _FIELDS[TagType(tag_type)][1])


def usage_map(data, tag_type):
    return getattr(data, _FIELDS[TagType(tag_type)][2])


def is_custom_tag(data, tag, tag_type):
    return tag in custom_tag_list(data, tag_type)


def tag_usage(data, tag, tag_type):
    return usage_map(data, tag_type).get(tag, 0)


def add_custom_tag(data, tag_type, label):
    tag_type = TagType(tag_type)
    label = (label or "").strip()
    if not label:
        return data

    tags_field, custom_field, _ = _FIELDS[tag_type]
    if label in getattr(data, tags_field):
        logger.warning("%s tag %r already exists, not adding it again", tag_type.value, label)
        return data
    if _collides(data, tag_type, label):
        logger.warning(
            "%s tag %r would share the title %r with an existing tag, not adding it",
            tag_type.value, label, full_tag(label, tag_type),
        )
        return data

    return replace(
        data,
        **{
            tags_field: getattr(data, tags_field) + (label,),
            custom_field: getattr(data, custom_field) + (label,),
        }
    )


def delete_custom_tag(data, tag_type, label):
    """Remove a custom tag and strip it from every student holding it."""
    tag_type = TagType(tag_type)
    tags_field, custom_field, _ = _FIELDS[tag_type]
    if label not in getattr(data, custom_field):
        logger.debug("%r is not a custom %s tag", label, tag_type.value)
        return data

    label_full = full_tag(label, tag_type)
    titles = {
        student: tuple(t for t in held if t != label_full)
        for student, held in data.student_titles.items()
    }

    data = replace(
        data,
        student_titles=titles,
        **{
            tags_field: tuple(t for t in getattr(data, tags_field) if t != label),
            custom_field: tuple(t for t in getattr(data, custom_field) if t != label),
        }
    )
    return recount_usage(data)


def recount_usage(data):
    """Rebuild both usage counters from the titles students currently hold."""
    counts = {TagType.OFFICER: Counter(), TagType.TEACHER: Counter()}

    for held in data.student_titles.values():
        for label in held:
            tag, tag_type = title_tag(data, label)
            counts[tag_type][tag] += 1

    return replace(
        data,
        officer_tags_usage=dict(counts[TagType.OFFICER]),
        teacher_tags_usage=dict(counts[TagType.TEACHER]),
    )


def toggle_title(data, student, tag, tag_type):
    tag_type = TagType(tag_type)
    usage_field = _FIELDS[tag_type][2]
    label = full_tag(tag, tag_type)

    held = data.titles_of(student)
    usage = dict(getattr(data, usage_field))

    if label in held:
        held = tuple(t for t in held if t != label)
        usage[tag] = max(0, usage.get(tag, 1) - 1)
    else:
        if student not in data.students or tag not in tag_list(data, tag_type):
            logger.debug("Cannot give %r the %s tag %r", student, tag_type.value, tag)
            return data
        held = held + (label,)
        usage[tag] = usage.get(tag, 0) + 1

    titles = dict(data.student_titles)
    titles[student] = held
    return replace(data, student_titles=titles, **{usage_field: usage})


def remove_title(data, student, label):
    if label not in data.titles_of(student):
        return data
    tag, tag_type = title_tag(data, label)
    return toggle_title(data, student, tag, tag_type)


def select_title_tag(ws, tag, tag_type):
    tag_type = TagType(tag_type)
    cursor = ws.title_cursor

    if cursor.student is not None:
        data = toggle_title(ws.data, cursor.student, tag, tag_type)
        return replace(ws, data=data, title_cursor=TitleCursor())

    if cursor.tag == tag and cursor.tag_type is tag_type:
        return replace(ws, title_cursor=TitleCursor())
    return replace(ws, title_cursor=TitleCursor(tag=tag, tag_type=tag_type))


def select_title_student(ws, student):
    cursor = ws.title_cursor

    if cursor.tag is not None:
        data = toggle_title(ws.data, student, cursor.tag, cursor.tag_type)
        return replace(ws, data=data, title_cursor=TitleCursor())

    if cursor.student == student:
        return replace(ws, title_cursor=TitleCursor())
    return replace(ws, title_cursor=TitleCursor(student=student))
