from pathlib import Path
from typing import Protocol


class DocumentWatcherPort(Protocol):
    @property
    def path(self) -> Path: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...
