from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import yaml

REDACTED_KEYS = {"data", "inline_data"}
SEPARATOR = "=" * 80


class APILogger:
    """
    Appends one readable YAML block per provider call to ``<log_dir>/api_calls.log``.

    Audio never reaches the file: inline payloads are replaced by a size marker.
    """

    def __init__(self, log_dir: Path, filename: str = "api_calls.log"):
        self.log_file = Path(log_dir) / filename
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        if not self.log_file.exists():
            self.log_file.write_text(
                f"# Xcribe API Call Log\n# Created at: {datetime.now().isoformat()}\n\n",
                encoding="utf-8",
            )

    def log(self, provider: str, endpoint: str, request: Any, response: Any, error: Optional[str] = None):
        entry = {"request": self._sanitize(request)}
        if error:
            entry["error"] = error
        else:
            entry["response"] = self._sanitize(response)

        header = f"[{datetime.now().isoformat()}] {provider.upper()} - {endpoint}"
        body = yaml.safe_dump(entry, sort_keys=False, allow_unicode=True, width=120)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(f"{SEPARATOR}\n{header}\n{SEPARATOR}\n{body}\n")

    def _sanitize(self, data: Any) -> Any:
        """Reduce ``data`` to YAML-safe primitives with audio payloads redacted."""
        if isinstance(data, (bytes, bytearray)):
            return f"<{len(data)} bytes redacted>"
        if data is None or isinstance(data, (str, int, float, bool)):
            return data
        if isinstance(data, (list, tuple)):
            return [self._sanitize(item) for item in data]
        if isinstance(data, dict):
            return {str(k): self._redact(k, v) for k, v in data.items()}
        return str(data)

    def _redact(self, key: Any, value: Any) -> Any:
        if key in REDACTED_KEYS and isinstance(value, str):
            return f"<{len(value)} chars redacted>"
        return self._sanitize(value)
