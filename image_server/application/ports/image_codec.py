from typing import Any, Optional, Protocol


class ImageCodec(Protocol):
    def decode(self, data: bytes) -> Any:
        ...

    def fit(self, image: Any, width: int, height: int) -> Any:
        ...

    def resize(self, image: Any, width: int, height: int) -> Any:
        ...

    def encode(self, image: Any, extension: str) -> bytes:
        ...

    def extension_for(self, image: Any) -> Optional[str]:
        ...
