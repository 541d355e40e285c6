"""Merge per-client request streams into one feed, newest first."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from .data_models import Client, ProbeRequest

ClientStream = Tuple[Client, Sequence[ProbeRequest]]


@dataclass(frozen=True)
class TaggedRequest:
    """A probe request labelled with the client that reported it."""

    request: ProbeRequest
    client_id: str
    client_name: str

    @property
    def start_time(self) -> datetime:
        return self.request.start_time


def merge_client_requests(streams: Iterable[ClientStream], limit: Optional[int] = None) -> List[TaggedRequest]:
    """
    Combine request streams into one sequence sorted by ``start_time`` descending.

    Input streams need not be sorted. Equal start times keep their arrival
    order within a client, then client iteration order, so identical inputs
    always produce identical output.

    Args:
        streams: ``(client, requests)`` pairs in client iteration order
        limit: Keep only the ``limit`` most recent entries; None keeps all

    Returns:
        New list of TaggedRequest, at most ``limit`` long
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative (got {limit})")

    tagged = [
        TaggedRequest(request=request, client_id=client.id, client_name=client.name)
        for client, requests in streams
        for request in requests
    ]
    # sorted() is stable, including with reverse=True
    tagged = sorted(tagged, key=lambda entry: entry.start_time, reverse=True)

    if limit is not None:
        del tagged[limit:]
    return tagged
