from sqlalchemy import or_

LIKE_ESCAPE = "\\"


def escape_like(term):
    """Make % and _ match themselves inside a LIKE pattern."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def apply_search(query, model, search_term, search_columns):
    """
    Case-insensitive substring search over several columns (OR semantics).

    Args:
      query: base SQLAlchemy query
      model: SQLAlchemy model class
      search_term: literal text to look for; empty or None leaves the query untouched
      search_columns: list of attribute names on model
    """
    if search_term:
        pattern = f"%{escape_like(search_term)}%"
        search_filters = [
            getattr(model, col).ilike(pattern, escape=LIKE_ESCAPE) for col in search_columns
        ]
        query = query.filter(or_(*search_filters))
    return query


def paginate_items(items, page=1, per_page=10):
    """
    Slices an already ordered list into one page.

    Returns a dict with items, total, page and pages.
    """
    page = page if page > 0 else 1
    per_page = per_page if per_page > 0 else 10

    total = len(items)
    pages = (total + per_page - 1) // per_page
    start = (page - 1) * per_page

    return {
        "items": items[start:start + per_page],
        "total": total,
        "page": page,
        "pages": pages,
    }
