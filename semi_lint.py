import fnmatch
import json
import os
import sys
import time

from ast_parser import ParseJsError, parse_js_file, parse_js_source, syntax_errors
from ast_walker import walk_ast
from engine_factory import ConfigError, build_engine, load_config, parse_severity
from fixer import apply_fixes
from semi_rule import SemiMode
from source_text import SourceText


JS_PATTERNS = ("*.js", "*.jsx", "*.mjs", "*.cjs")
IGNORED_DIRS = {"node_modules", "dist", "build", ".git"}

USAGE = (
    "Usage: semi-lint [--text] [--fix] [--debug] [--mode always|never] "
    "[--severity warn|error] [--config FILE] PATH..."
)


def _round_ms(value):
    return round(max(0.0, float(value)), 3)


def _timing_ms(parse_ms, traversal_ms, interpretation_ms):
    total = parse_ms + traversal_ms + interpretation_ms
    return {
        "parse": _round_ms(parse_ms),
        "traversal": _round_ms(traversal_ms),
        "interpretation": _round_ms(interpretation_ms),
        "total": _round_ms(total),
    }


def collect_files(paths):
    files = []
    for path in paths:
        if not os.path.isdir(path):
            files.append(path)
            continue

        for dirpath, dirnames, filenames in os.walk(path):
            dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
            for filename in sorted(filenames):
                if any(fnmatch.fnmatch(filename, pattern) for pattern in JS_PATTERNS):
                    files.append(os.path.join(dirpath, filename))
    return files


def _rule_item(diagnostic, source):
    line, column = source.line_col(diagnostic["span"].start)
    fix = diagnostic.get("fix")
    return {
        "severity": diagnostic["severity"],
        "source": "rule",
        "rule": diagnostic["rule"],
        "line": line,
        "column": column,
        "message": diagnostic["message"],
        "suggestion": diagnostic["help"],
        "fix": {
            "kind": fix["kind"],
            "span": list(fix["span"]),
            "text": fix["text"],
        } if fix else None,
    }


def _parser_items(tree):
    return [
        {
            "severity": "error",
            "source": "parser",
            "rule": None,
            "line": line,
            "column": column,
            "message": message,
            "suggestion": "Fix the syntax error so the file parses cleanly.",
            "fix": None,
        }
        for line, column, message in syntax_errors(tree)
    ]


def _limited_analysis_item(first_error_line=None):
    return {
        "severity": "warning",
        "source": "runtime",
        "rule": None,
        "line": first_error_line if isinstance(first_error_line, int) else None,
        "column": None,
        "message": (
            "Semicolon checks were limited because parser errors were found. "
            "Fix parser errors first, then run analysis again."
        ),
        "suggestion": "Resolve syntax errors first; semicolon placement depends on a clean parse.",
        "fix": None,
    }


def _summary(items):
    out = {"error": 0, "warning": 0}
    for item in items:
        sev = item.get("severity")
        if sev in out:
            out[sev] += 1
    out["total"] = out["error"] + out["warning"]
    return out


def _sort_items(items):
    severity_rank = {"error": 0, "warning": 1}
    return sorted(
        items,
        key=lambda i: (
            i.get("line") if isinstance(i.get("line"), int) else 10**9,
            i.get("column") if isinstance(i.get("column"), int) else 10**9,
            severity_rank.get(i.get("severity"), 2),
        ),
    )


def _check(tree, source, engine, debug=False):
    traversal_start = time.perf_counter()
    nodes = []
    walk_ast(tree.root_node, nodes, debug=debug)
    traversal_ms = (time.perf_counter() - traversal_start) * 1000.0

    parser_items = _parser_items(tree)
    if parser_items:
        return parser_items, [], traversal_ms, 0.0

    interpretation_start = time.perf_counter()
    diagnostics = engine.run(nodes, source)
    interpretation_ms = (time.perf_counter() - interpretation_start) * 1000.0
    return parser_items, diagnostics, traversal_ms, interpretation_ms


def _failed_result(display_name, message, parse_ms):
    items = [
        {
            "severity": "error",
            "source": "runtime",
            "rule": None,
            "line": None,
            "column": None,
            "message": message,
            "suggestion": "Check that the path exists and is a UTF-8 encoded JavaScript file.",
            "fix": None,
        }
    ]
    return {
        "file": display_name,
        "path": None,
        "ok": False,
        "error": message,
        "items": items,
        "summary": _summary(items),
        "timing_ms": _timing_ms(parse_ms, 0.0, 0.0),
        "fixed": 0,
    }


def lint_file(filename, engine, *, fix=False, debug=False):
    """
    Lints one file. Returns (result, source); source is None when the
    file could not be read.
    """
    display_name = filename

    parse_start = time.perf_counter()
    try:
        tree, data = parse_js_file(filename)
    except ParseJsError as exc:
        parse_ms = (time.perf_counter() - parse_start) * 1000.0
        return _failed_result(display_name, f"Failed to parse {display_name}: {exc}", parse_ms), None
    parse_ms = (time.perf_counter() - parse_start) * 1000.0

    source = SourceText(data, filename)
    parser_items, diagnostics, traversal_ms, interpretation_ms = _check(tree, source, engine, debug)

    fixed = 0
    if fix and diagnostics:
        fixed_data, fixed = apply_fixes(data, diagnostics)
        if fixed:
            with open(filename, "wb") as fh:
                fh.write(fixed_data)
            # Report what is still outstanding after this single pass.
            source = SourceText(fixed_data, filename)
            parser_items, diagnostics, _, _ = _check(parse_js_source(fixed_data), source, engine)

    items = list(parser_items) + [_rule_item(d, source) for d in diagnostics]
    if parser_items:
        first_error_line = min(item["line"] for item in parser_items)
        items.append(_limited_analysis_item(first_error_line))

    items = _sort_items(items)
    result = {
        "file": display_name,
        "path": os.path.realpath(filename),
        "ok": True,
        "error": None,
        "items": items,
        "summary": _summary(items),
        "timing_ms": _timing_ms(parse_ms, traversal_ms, interpretation_ms),
        "fixed": fixed,
    }
    return result, source


def format_text(result, source):
    out = []
    for item in result["items"]:
        symbol = "×" if item["severity"] == "error" else "⚠"
        rule = item.get("rule")
        label = f"eslint({rule})" if rule else item["source"]
        out.append(f"{symbol} {label}: {item['message']}")

        line = item.get("line")
        if isinstance(line, int):
            column = item.get("column") or 1
            out.append(f"   ╭─[{result['file']}:{line}:{column}]")
            if source is not None:
                out.append(f" {line} │ {source.line_text(line)}")
            out.append("   ╰────")
        if item.get("suggestion"):
            out.append(f"  help: {item['suggestion']}")
        out.append("")
    return "\n".join(out)


def _fail(message, json_mode):
    if json_mode:
        print(json.dumps({"ok": False, "error": message}))
    else:
        print(message)
    return 2


def _take_value(args, flag):
    idx = args.index(flag)
    if idx + 1 >= len(args):
        return args, None
    value = args[idx + 1]
    return args[:idx] + args[idx + 2:], value


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    json_mode = True
    if "--text" in args:
        json_mode = False
        args = [a for a in args if a != "--text"]

    if "--help" in args or "-h" in args:
        print(USAGE)
        return 0

    fix = "--fix" in args
    debug = "--debug" in args
    args = [a for a in args if a not in ("--fix", "--debug")]

    rules_config = {}
    if "--config" in args:
        args, config_path = _take_value(args, "--config")
        if config_path is None:
            return _fail("Missing value after --config (expected a JSON config file).", json_mode)
        try:
            rules_config.update(load_config(config_path))
        except ConfigError as exc:
            return _fail(str(exc), json_mode)

    severity = None
    if "--severity" in args:
        args, raw_severity = _take_value(args, "--severity")
        if raw_severity is None:
            return _fail("Missing value after --severity (expected warn or error).", json_mode)
        try:
            severity = parse_severity(raw_severity)
        except ConfigError as exc:
            return _fail(str(exc), json_mode)
        if severity is None:
            return _fail("--severity must be warn or error; use a config file to turn the rule off.", json_mode)

    mode = None
    if "--mode" in args:
        args, mode = _take_value(args, "--mode")
        if mode is None:
            return _fail("Missing value after --mode (expected never or always).", json_mode)
        valid_modes = sorted(m.value for m in SemiMode)
        if mode not in valid_modes:
            return _fail(
                f"Unknown mode: {mode}. Valid modes: {', '.join(valid_modes)}.",
                json_mode,
            )

    if severity is not None or mode is not None:
        current = rules_config.get("semi", "warn")
        if isinstance(current, (list, tuple)):
            base_severity, options = (current[0] if current else "warn"), list(current[1:])
        else:
            base_severity, options = current, []
        if mode is not None:
            if options and isinstance(options[0], str):
                options[0] = mode
            else:
                options.insert(0, mode)
        rules_config["semi"] = [severity or base_severity] + options

    unknown_flags = [a for a in args if a.startswith("--")]
    if unknown_flags:
        return _fail(f"Unknown option(s): {', '.join(unknown_flags)}. {USAGE}", json_mode)

    if not args:
        return _fail("No files provided.", json_mode)

    try:
        engine = build_engine(rules_config)
    except ConfigError as exc:
        return _fail(str(exc), json_mode)

    selected_mode = SemiMode.NEVER.value
    for rule in engine.rules:
        if rule.name == "semi":
            selected_mode = rule.mode.value

    overall_start = time.perf_counter()
    results = []
    for filename in collect_files(args):
        result, source = lint_file(filename, engine, fix=fix, debug=debug)
        results.append(result)
        if not json_mode:
            text = format_text(result, source)
            if text:
                print(text)

    summary = _summary([item for result in results for item in result["items"]])
    summary["fixed"] = sum(result["fixed"] for result in results)

    if json_mode:
        total_ms = _round_ms((time.perf_counter() - overall_start) * 1000.0)
        print(
            json.dumps(
                {
                    "ok": True,
                    "results": results,
                    "summary": summary,
                    "timing_ms": {"total": total_ms},
                    "mode": selected_mode,
                }
            )
        )
    elif summary["total"]:
        print(f"Found {summary['warning']} warnings and {summary['error']} errors.")
    else:
        print("✓ No semicolon violations found")

    return 1 if summary["total"] else 0


if __name__ == "__main__":
    sys.exit(main())
