"""Streaming sign/verify built on a two-input completion barrier.

A :class:`SignStream` waits for its key and payload, a :class:`VerifyStream`
for its key and token. Each input is a :class:`DataCell` that producers write
to and close in any order. When the second cell closes the stream computes
its result exactly once and reports it through events::

    stream = SignStream(header={"alg": "HS256"}, encoding="utf-8")
    stream.on("done", print)
    stream.payload.write('{"sub": "123"}')
    stream.payload.close()
    stream.key.close("secret")  # prints the token
"""

from __future__ import annotations

import abc
import asyncio
import enum
import logging
from collections import defaultdict
from typing import (
    Any,
    AsyncIterable,
    Callable,
    DefaultDict,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from . import jws
from .config import get_config
from .exceptions import StreamClosedError, StreamPendingError

logger = logging.getLogger(__name__)

Chunk = Union[str, bytes, bytearray]

EVENTS = ("done", "data", "end", "error", "close")


class StreamState(str, enum.Enum):
    WAITING = "waiting"
    DONE = "done"
    FAILED = "failed"


class DataCell:
    """Write-once, close-once accumulator for one stream input.

    ``None`` creates an open cell to be filled with :meth:`write` and
    :meth:`close`. Any other value creates a cell that is already closed:
    text and bytes become the buffered content, other objects (key handles,
    JSON payloads) are held as they are.
    """

    def __init__(self, data: Any = None, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self.writable = True
        self._chunks: List[bytes] = []
        self._held: Any = None
        self._close_callbacks: List[Callable[[], None]] = []

        if data is None:
            return
        if isinstance(data, (str, bytes, bytearray)):
            self._chunks.append(self._to_bytes(data))
        else:
            self._held = data
        self.writable = False

    def _to_bytes(self, chunk: Chunk) -> bytes:
        if isinstance(chunk, str):
            return chunk.encode(self.encoding)
        if isinstance(chunk, (bytes, bytearray)):
            return bytes(chunk)
        raise TypeError(f"chunk must be str or bytes, got {type(chunk).__name__}")

    @property
    def closed(self) -> bool:
        return not self.writable

    @property
    def buffer(self) -> bytes:
        return b"".join(self._chunks)

    @property
    def value(self) -> Any:
        """Held object if one was supplied, otherwise the buffered bytes."""
        if self._held is not None:
            return self._held
        return self.buffer

    def write(self, chunk: Chunk) -> None:
        if not self.writable:
            raise StreamClosedError("cannot write to a closed input")
        self._chunks.append(self._to_bytes(chunk))

    def close(self, chunk: Optional[Chunk] = None) -> None:
        """Close the cell, optionally writing a final ``chunk`` first.

        Closing an already closed cell does nothing.
        """
        if not self.writable:
            return
        if chunk is not None:
            self.write(chunk)
        self.writable = False
        for callback in self._close_callbacks:
            callback()
        self._close_callbacks.clear()

    def on_close(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` once the cell closes, immediately if it already has."""
        if self.writable:
            self._close_callbacks.append(callback)
        else:
            callback()

    async def feed(self, source: Union[AsyncIterable[Chunk], Iterable[Chunk]]) -> None:
        """Write every chunk from ``source`` and close the cell."""
        if hasattr(source, "__aiter__"):
            async for chunk in source:
                self.write(chunk)
        else:
            for chunk in source:
                self.write(chunk)
                await asyncio.sleep(0)
        self.close()


class CompletionStream(metaclass=abc.ABCMeta):
    """Two-input barrier that finalizes once and replays its outcome."""

    def __init__(self) -> None:
        self.readable = True
        self.state = StreamState.WAITING
        self._listeners: DefaultDict[str, List[Callable[..., Any]]] = defaultdict(list)
        self._emitted: Dict[str, Tuple[Any, ...]] = {}
        self._result: Any = None
        self._error: Optional[BaseException] = None
        self._waiters: List[asyncio.Future] = []

    def on(self, event: str, callback: Callable[..., Any]) -> "CompletionStream":
        """Register ``callback`` for ``event``.

        Events already emitted are replayed to late listeners immediately.
        """
        if event not in EVENTS:
            raise ValueError(f"Unknown event {event!r}; expected one of {EVENTS}")
        if event in self._emitted:
            callback(*self._emitted[event])
        else:
            self._listeners[event].append(callback)
        return self

    def _emit(self, event: str, *args: Any) -> None:
        self._emitted[event] = args
        for callback in self._listeners.pop(event, []):
            callback(*args)

    def _bind(self, first: DataCell, second: DataCell) -> None:
        first.on_close(lambda: self._maybe_finalize(second))
        second.on_close(lambda: self._maybe_finalize(first))

    def _maybe_finalize(self, other: DataCell) -> None:
        if not other.writable and self.readable:
            self._finalize()

    @abc.abstractmethod
    def _compute(self) -> Tuple[Any, Tuple[Any, ...]]:
        """Return the result and any extra ``done`` event arguments."""
        raise NotImplementedError

    def _finalize(self) -> None:
        self.readable = False
        try:
            result, extra = self._compute()
        except Exception as exc:
            self.state = StreamState.FAILED
            self._error = exc
            logger.warning(f"{type(self).__name__} failed: {exc}")
            self._emit("error", exc)
            self._emit("close")
        else:
            self.state = StreamState.DONE
            self._result = result
            logger.debug(f"{type(self).__name__} finalized")
            self._emit("done", result, *extra)
            self._emit("data", result)
            self._emit("end")
        finally:
            for waiter in self._waiters:
                if not waiter.done():
                    waiter.set_result(None)
            self._waiters.clear()

    def result(self) -> Any:
        """Return the result, raising the failure or ``StreamPendingError``."""
        if self.state is StreamState.WAITING:
            raise StreamPendingError("stream is still waiting for its inputs")
        if self.state is StreamState.FAILED:
            raise self._error
        return self._result

    async def wait(self) -> Any:
        """Wait until both inputs have closed and return :meth:`result`."""
        if self.state is StreamState.WAITING:
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            await waiter
        return self.result()


def _first_key(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


class SignStream(CompletionStream):
    """Produces a compact token once key and payload are both available."""

    sign = staticmethod(jws.encode)

    def __init__(
        self,
        header: Mapping[str, Any],
        payload: Any = None,
        key: Any = None,
        secret: Any = None,
        private_key: Any = None,
        encoding: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.header = header
        self.encoding = encoding or get_config().encoding
        self.key = DataCell(_first_key(secret, private_key, key))
        self.secret = self.private_key = self.key
        self.payload = DataCell(payload, encoding=self.encoding)
        self._bind(self.key, self.payload)

    def _compute(self) -> Tuple[Any, Tuple[Any, ...]]:
        token = jws.encode(self.header, self.payload.value, self.key.value, self.encoding)
        return token, ()


class VerifyStream(CompletionStream):
    """Verifies a compact token once key and token are both available.

    The ``done`` event carries ``(valid, decoded)`` where ``decoded`` is the
    :class:`~jwskit.jws.DecodedToken` or None for a malformed token.
    """

    verify = staticmethod(jws.verify)
    decode = staticmethod(jws.decode)
    is_valid = staticmethod(jws.is_valid_token)

    def __init__(
        self,
        signature: Any = None,
        algorithm: Optional[str] = None,
        key: Any = None,
        secret: Any = None,
        public_key: Any = None,
        encoding: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.algorithm = algorithm
        self.encoding = encoding or get_config().encoding
        self.key = DataCell(_first_key(secret, public_key, key))
        self.secret = self.public_key = self.key
        self.signature = DataCell(signature)
        self._bind(self.key, self.signature)

    def _compute(self) -> Tuple[Any, Tuple[Any, ...]]:
        token = self.signature.value
        valid = jws.verify(token, self.algorithm, self.key.value)
        decoded = jws.decode(token, encoding=self.encoding)
        return valid, (decoded,)


def create_sign(**options: Any) -> SignStream:
    return SignStream(**options)


def create_verify(**options: Any) -> VerifyStream:
    return VerifyStream(**options)
