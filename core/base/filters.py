"""
Query-string filtering for list views.

    queryset = filter_by_params(queryset, request.query_params, (
        ('status', 'status'),
        ('project_id', 'project_id'),
    ))

Parameters ending in ``_id`` must be integers; anything else is a 400.
"""
from rest_framework.exceptions import ValidationError

INTEGER_REQUIRED = "A valid integer is required."


def parse_id(value, param):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError({param: [INTEGER_REQUIRED]})


def filter_by_params(queryset, query_params, filters):
    invalid = {}
    for param, lookup in filters:
        value = query_params.get(param)
        if not value:
            continue
        if param.endswith('_id'):
            try:
                value = int(value)
            except ValueError:
                invalid[param] = [INTEGER_REQUIRED]
                continue
        queryset = queryset.filter(**{lookup: value})

    if invalid:
        raise ValidationError(invalid)
    return queryset
