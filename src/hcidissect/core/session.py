from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any


logger = logging.getLogger(__name__)


@dataclass
class ChannelRecord:
    """
    One L2CAP channel as seen from the side that sent the Connection Request.

    source_cid is the requester's CID, dest_cid the responder's. local_mtu is
    what the requester can receive, remote_mtu what the responder can receive.
    """

    identifier: int
    source_cid: int
    psm: int
    dest_cid: int | None = None
    local_mtu: int | None = None
    remote_mtu: int | None = None
    flush_timeout: int | None = None

    @property
    def state(self) -> str:
        if self.local_mtu is not None or self.remote_mtu is not None:
            return "configured"
        if self.dest_cid is not None:
            return "connected"
        return "requested"

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "source_cid": self.source_cid,
            "dest_cid": self.dest_cid,
            "psm": self.psm,
            "local_mtu": self.local_mtu,
            "remote_mtu": self.remote_mtu,
            "flush_timeout": self.flush_timeout,
            "state": self.state,
        }


@dataclass
class Session:
    """
    Cross-packet decoder state. Single writer: decode packets one at a time,
    in capture order, against one session.
    """

    channels: list[ChannelRecord] = field(default_factory=list)

    def by_source_cid(self, cid: int) -> ChannelRecord | None:
        for rec in self.channels:
            if rec.source_cid == cid:
                return rec
        return None

    def by_dest_cid(self, cid: int) -> ChannelRecord | None:
        for rec in self.channels:
            if rec.dest_cid is not None and rec.dest_cid == cid:
                return rec
        return None

    def channel_for_cid(self, cid: int) -> ChannelRecord | None:
        """Record owning traffic addressed to `cid` on a dynamic channel."""
        return self.by_dest_cid(cid)

    # ---- state transitions ------------------------------------------------

    def on_connection_request(self, *, identifier: int, psm: int, source_cid: int) -> ChannelRecord:
        rec = self.by_source_cid(source_cid)
        if rec is not None:
            logger.debug("connection request for known source cid %#06x ignored", source_cid)
            return rec
        rec = ChannelRecord(identifier=identifier, source_cid=source_cid, psm=psm)
        self.channels.append(rec)
        logger.debug("channel requested: scid=%#06x psm=%#06x id=%#04x", source_cid, psm, identifier)
        return rec

    def on_connection_response(self, *, dest_cid: int, source_cid: int) -> ChannelRecord | None:
        rec = self.by_source_cid(source_cid)
        if rec is None:
            logger.debug("connection response for unknown source cid %#06x", source_cid)
            return None
        rec.dest_cid = dest_cid
        logger.debug("channel connected: scid=%#06x dcid=%#06x", source_cid, dest_cid)
        return rec

    def on_configuration_request(
        self, *, dest_cid: int, mtu: int | None = None, flush_timeout: int | None = None
    ) -> ChannelRecord | None:
        # The wire "destination CID" is the recipient's own CID: matching the
        # responder's side means the requester is configuring its inbound MTU.
        rec = self.by_dest_cid(dest_cid)
        if rec is not None:
            if mtu is not None:
                rec.local_mtu = mtu
                logger.debug("channel scid=%#06x local mtu=%d", rec.source_cid, mtu)
            if flush_timeout is not None:
                rec.flush_timeout = flush_timeout
            return rec
        rec = self.by_source_cid(dest_cid)
        if rec is not None:
            if mtu is not None:
                rec.remote_mtu = mtu
                logger.debug("channel scid=%#06x remote mtu=%d", rec.source_cid, mtu)
            if flush_timeout is not None:
                rec.flush_timeout = flush_timeout
            return rec
        logger.debug("configuration request for unknown cid %#06x", dest_cid)
        return None

    def on_configuration_response(
        self, *, source_cid: int, mtu: int | None = None, flush_timeout: int | None = None
    ) -> ChannelRecord | None:
        rec = self.by_dest_cid(source_cid)
        if rec is None:
            logger.debug("configuration response for unknown cid %#06x", source_cid)
            return None
        if mtu is not None:
            rec.remote_mtu = mtu
            logger.debug("channel scid=%#06x remote mtu=%d", rec.source_cid, mtu)
        if flush_timeout is not None:
            rec.flush_timeout = flush_timeout
        return rec

    def to_dict(self) -> dict[str, Any]:
        return {"channels": [rec.to_dict() for rec in self.channels]}


def new_session() -> Session:
    return Session()
