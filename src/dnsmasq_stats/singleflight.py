"""In-flight call coalescing.

Brief:
  SingleFlight lets concurrent callers asking for the same key share a single
  execution, so overlapping collection cycles issue one network round trip
  per identical statistics query.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


class _Call:
    """
    Brief: One in-flight call shared by every caller using the same key.

    Inputs:
      - None

    Outputs:
      - _Call with a completion event and the leader's result or error.
    """

    def __init__(self) -> None:
        self.done = threading.Event()
        self.result: Any = None
        self.error: Optional[BaseException] = None
        self.dups = 0


class SingleFlight:
    """
    Brief: Collapse concurrent identical calls into one execution.

    While a call for ``key`` is running, further callers with the same key
    block until it finishes and then observe the same result (or the same
    exception). Once the call completes the key is forgotten, so later calls
    run again; nothing is cached.

    Example:
        >>> sf = SingleFlight()
        >>> sf.do("k", lambda: 1)
        (1, False)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: Dict[Hashable, _Call] = {}

    def do(self, key: Hashable, fn: Callable[[], Any]) -> Tuple[Any, bool]:
        """
        Brief: Run fn once per in-flight key.

        Inputs:
          - key: hashable identity of the call
          - fn: zero-argument callable executed by the first caller only

        Outputs:
          - (result, shared): shared is True for callers that waited on
            another caller's execution; the caller that ran fn always gets
            False
        """
        with self._lock:
            call = self._calls.get(key)
            if call is not None:
                call.dups += 1
                leader = False
            else:
                call = _Call()
                self._calls[key] = call
                leader = True

        if not leader:
            call.done.wait()
            if call.error is not None:
                raise call.error
            return call.result, True

        try:
            call.result = fn()
        except BaseException as exc:
            call.error = exc
            raise
        finally:
            with self._lock:
                self._calls.pop(key, None)
            call.done.set()
        return call.result, False

    def in_flight(self) -> int:
        """Number of keys currently executing."""
        with self._lock:
            return len(self._calls)
