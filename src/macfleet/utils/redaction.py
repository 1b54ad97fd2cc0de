from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Redactor:
    enabled: bool = True
    _user_map: dict[str, int] = field(default_factory=dict)
    _user_counter: int = 0

    def redact_serial(self, serial: str) -> str:
        if not self.enabled or len(serial) <= 4:
            return serial
        return "x" * (len(serial) - 4) + serial[-4:]

    def redact_email(self, email: str) -> str:
        if not self.enabled or "@" not in email:
            return email
        local, domain = email.rsplit("@", 1)
        counter = self._user_map.get(local)
        if counter is None:
            self._user_counter += 1
            counter = self._user_counter
            self._user_map[local] = counter
        return f"user{counter:02d}@{domain}"
