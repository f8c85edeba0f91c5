# ledger_engine/core/categorizer.py
def categorize(description, categories_map, default=None):
    """Return the first category whose keyword appears in the description."""
    name = str(description).lower()
    for cat, keywords in categories_map.items():
        if any(kw.lower() in name for kw in keywords):
            return cat
    return default
