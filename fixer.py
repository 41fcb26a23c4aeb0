def _fix_range(fix):
    span = fix["span"]
    if fix["kind"] == "insert_after":
        return span.end, span.end
    return span.start, span.end


def apply_fixes(data, diagnostics):
    """
    Applies the fix of every diagnostic to `data` in a single pass.

    Fixes are applied in source order; a fix that overlaps one already
    applied (or inserts at the same offset) is skipped and left for the
    next run. Returns (new_data, applied_count).
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    fixes = sorted((d["fix"] for d in diagnostics if d.get("fix")), key=_fix_range)

    out = []
    cursor = 0
    last_range = None
    applied = 0
    for fix in fixes:
        start, end = _fix_range(fix)
        if last_range is not None and (start < last_range[1] or (start, end) == last_range):
            continue

        out.append(data[cursor:start])
        out.append(fix.get("text", "").encode("utf-8"))
        cursor = end
        last_range = (start, end)
        applied += 1

    out.append(data[cursor:])
    return b"".join(out), applied
