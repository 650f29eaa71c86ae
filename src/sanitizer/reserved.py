# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Default reserved names exempt from masking."""

import builtins
import keyword
import logging

from sanitizer.model import SanitizeOptions

logger = logging.getLogger(__name__)

PYTHON_RESERVED: frozenset[str] = frozenset(
    set(keyword.kwlist)
    | set(keyword.softkwlist)
    | set(dir(builtins))
    | {"self", "cls"}
)

SCRIPT_RESERVED: frozenset[str] = frozenset(
    {
        # keywords and literals
        "abstract", "any", "as", "async", "await", "boolean", "break", "case",
        "catch", "class", "const", "constructor", "continue", "debugger",
        "declare", "default", "delete", "do", "else", "enum", "export",
        "extends", "false", "finally", "for", "from", "function", "get", "if",
        "implements", "import", "in", "infer", "instanceof", "interface", "is",
        "keyof", "let", "module", "namespace", "never", "new", "null",
        "number", "object", "of", "package", "private", "protected", "public",
        "readonly", "require", "return", "set", "static", "string", "super",
        "switch", "symbol", "this", "throw", "true", "try", "type", "typeof",
        "undefined", "unique", "unknown", "var", "void", "while", "with",
        "yield",
        # runtime globals
        "Array", "Boolean", "Date", "Error", "JSON", "Map", "Math", "Number",
        "Object", "Promise", "Proxy", "Reflect", "RegExp", "Set", "String",
        "Symbol", "WeakMap", "WeakSet", "console", "document", "exports",
        "fetch", "globalThis", "localStorage", "module", "navigator",
        "process", "sessionStorage", "setInterval", "setTimeout",
        "clearInterval", "clearTimeout", "window", "arguments",
        # framework hooks and lifecycle
        "React", "Fragment", "useState", "useEffect", "useContext",
        "useReducer", "useCallback", "useMemo", "useRef", "useLayoutEffect",
        "useImperativeHandle", "useId", "useTransition", "render",
        "componentDidMount", "componentDidUpdate", "componentWillUnmount",
        "shouldComponentUpdate", "getDerivedStateFromProps", "children",
        "key", "ref", "state", "setState",
    }
)

_RESERVED_BY_FAMILY: dict[str, frozenset[str]] = {
    "python": PYTHON_RESERVED,
    "typescript": SCRIPT_RESERVED,
}


def build_reserved_set(query_key: str, options: SanitizeOptions) -> frozenset[str]:
    """Build the active reserved set for one sanitize call.

    Args:
        query_key: Language family key, ``python`` or ``typescript``.
        options: Sanitize options carrying the whitelist and its mode.

    Returns:
        Names that must never be masked.
    """
    whitelist = frozenset(options.whitelist)
    if options.whitelist_mode == "overwrite":
        return whitelist
    return _RESERVED_BY_FAMILY.get(query_key, frozenset()) | whitelist
