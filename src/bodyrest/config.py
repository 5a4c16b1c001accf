"""Settings shared by the app, its dispatchers and ``App.run()``."""

from dataclasses import dataclass

from bodyrest.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Frozen settings; pass overrides as keywords::

        config = AppConfig(debug=True, port=3000, max_multipart_size=8 << 20)
    """

    # uvicorn
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    log_level: str = "info"

    # binding
    max_multipart_size: int = 32 << 20
    body_methods: frozenset[str] = frozenset({"POST", "PUT", "PATCH"})

    def __post_init__(self) -> None:
        if self.max_multipart_size <= 0:
            msg = f"max_multipart_size must be positive, got {self.max_multipart_size}"
            raise ConfigurationError(msg)
        if any(m != m.upper() for m in self.body_methods):
            msg = f"body_methods must be upper-case, got {sorted(self.body_methods)}"
            raise ConfigurationError(msg)
