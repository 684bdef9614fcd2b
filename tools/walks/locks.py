import asyncio
from collections import defaultdict
from typing import DefaultDict


class DogLockRegistry:
    """
    asyncio-замки на собаку: слияния территории одной собаки идут строго по очереди.

    Вторая прогулка, завершившаяся одновременно с первой, ждёт и сливается
    уже с обновлённой территорией.
    """

    def __init__(self):
        self._locks: DefaultDict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def for_dog(self, dog_id: str) -> asyncio.Lock:
        return self._locks[dog_id]
