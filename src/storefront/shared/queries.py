"""Repository query helpers."""

PAGE_SIZE = 100


def fetch_all(queryset, page_size=PAGE_SIZE):
    """Return every record matched by ``queryset``, reading page by page.

    Protean querysets return a bounded page by default; aggregates such as
    rating means must see the whole set.
    """
    records = []
    offset = 0
    while True:
        page = queryset.offset(offset).limit(page_size).all().items
        records.extend(page)
        if len(page) < page_size:
            return records
        offset += page_size
