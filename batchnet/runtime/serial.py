# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""Caller-side wrapper that runs one session call at a time."""

import threading
from typing import Sequence

import numpy as np

from .session import Feeds, ServingSession


class SerializedSession:
    """
    Serializes run, reshape and load_weights on a shared session.

    Example:
        shared = SerializedSession(ServingSession(graph))
        # safe to call from several threads
        shared.run({"data": x}, ["prob"])
    """

    def __init__(self, session: ServingSession):
        self._session = session
        self._lock = threading.Lock()

    @property
    def session(self) -> ServingSession:
        return self._session

    @property
    def capacity(self) -> int:
        with self._lock:
            return self._session.capacity

    def run(
        self,
        inputs: Feeds,
        output_names: Sequence[str],
        target_names: Sequence[str] = (),
    ) -> list[np.ndarray]:
        with self._lock:
            return self._session.run(inputs, output_names, target_names)

    def reshape(self, batch_size: int) -> None:
        with self._lock:
            self._session.reshape(batch_size)

    def load_weights(self, path) -> list[str]:
        with self._lock:
            return self._session.load_weights(path)
