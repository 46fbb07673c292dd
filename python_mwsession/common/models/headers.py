from typing import Dict, List, Optional
from pydantic import BaseModel, Field

class HeaderItem(BaseModel):
    key: str
    value: str

    def redacted_value(self) -> str:
        """Header value safe for logs: cookie names survive, secrets do not."""
        key_lower = self.key.lower()
        if key_lower in ("cookie", "set-cookie"):
            pairs = [p.strip() for p in self.value.split(";") if p.strip()]
            if key_lower == "set-cookie":
                pairs = pairs[:1]
            return "; ".join(f"{p.partition('=')[0]}=***" for p in pairs)
        if "auth" in key_lower or "token" in key_lower:
            return "***REDACTED***"
        return self.value

    def __repr__(self):
        return f"HeaderItem(key='{self.key}', value='{self.redacted_value()}')"

class Headers(BaseModel):
    headers: List[HeaderItem] = Field(default_factory=list)

    def add(self, key: str, value: str) -> "Headers":
        for h in self.headers:
            if h.key.lower() == key.lower():
                h.value = value
                return self
        self.headers.append(HeaderItem(key=key, value=value))
        return self

    def remove(self, key: str) -> "Headers":
        self.headers = [h for h in self.headers if h.key.lower() != key.lower()]
        return self

    def contains(self, key: str) -> bool:
        return any(h.key.lower() == key.lower() for h in self.headers)

    def get(self, key: str) -> Optional[str]:
        for h in self.headers:
            if h.key.lower() == key.lower():
                return h.value
        return None

    def to_dict(self) -> Dict[str, str]:
        return {h.key: h.value for h in self.headers}

    @staticmethod
    def from_dict(d: Dict[str, str]) -> "Headers":
        headers = Headers()
        for k, v in d.items():
            headers.add(k, v)
        return headers

    def redacted(self) -> Dict[str, str]:
        return {h.key: h.redacted_value() for h in self.headers}
