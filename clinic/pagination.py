from rest_framework.exceptions import ValidationError


def page_params(request, default_size: int = 20, max_size: int = 100) -> tuple[int, int]:
    """Read ``page``/``pageSize`` from the query string."""
    try:
        page = int(request.query_params.get('page') or 1)
        page_size = int(request.query_params.get('pageSize') or default_size)
    except ValueError:
        raise ValidationError({'page': ['Invalid pagination parameters']})
    return max(1, page), min(max_size, max(1, page_size))


def paginate(qs, page: int, page_size: int):
    """Slice a queryset; returns ``(rows, pagination dict)``."""
    total = qs.count()
    start = (page - 1) * page_size
    rows = list(qs[start:start + page_size])
    return rows, {'total': total, 'page': page, 'pageSize': page_size}
