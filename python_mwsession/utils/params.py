"""Parameter helpers shared by the request pipeline and endpoint wrappers."""
from typing import Any, Dict, Mapping, Optional


def filter_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``params`` without entries whose value is None."""
    return {key: value for key, value in params.items() if value is not None}


def merge_params(
    defaults: Optional[Mapping[str, Any]],
    params: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """Overlay call parameters on the client defaults, then drop unset ones.

    A call parameter explicitly set to None removes the default for that call.
    """
    merged = dict(defaults or {})
    merged.update(params or {})
    return filter_params(merged)


def encode_value(value: Any) -> Optional[str]:
    # MediaWiki treats any present boolean parameter as true
    if isinstance(value, bool):
        return "1" if value else None
    if isinstance(value, (list, tuple, set, frozenset)):
        return "|".join(str(v) for v in value)
    return str(value)


def encode_params(params: Mapping[str, Any]) -> Dict[str, str]:
    encoded = {}
    for key, value in filter_params(params).items():
        text = encode_value(value)
        if text is not None:
            encoded[key] = text
    return encoded
