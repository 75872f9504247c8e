import asyncio
import typing


T = typing.TypeVar("T")


class AsyncJolt:
    """Yield to the event loop on the way in and on the way out."""

    async def __aenter__(self) -> None:
        await asyncio.sleep(0)

    async def __aexit__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        await asyncio.sleep(0)


async def jolted_thread(
    func: typing.Callable[..., T], /, *args: typing.Any, **kwargs: typing.Any
) -> T:
    async with AsyncJolt():
        return await asyncio.to_thread(func, *args, **kwargs)
