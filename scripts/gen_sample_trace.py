#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _bootstrap_src_path() -> None:
    project_root = Path(__file__).resolve().parents[1]
    src_dir = project_root / "src"
    sys.path.insert(0, str(src_dir))


def _u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "little")


def _acl(l2cap_payload: bytes, cid: int) -> bytes:
    # handle 0x0001, PB=first automatically flushable
    frame = _u16(len(l2cap_payload)) + _u16(cid) + l2cap_payload
    return _u16(0x2001) + _u16(len(frame)) + frame


def _signal(code: int, identifier: int, body: bytes) -> bytes:
    return bytes([code, identifier]) + _u16(len(body)) + body


def main() -> int:
    _bootstrap_src_path()
    from hcidissect.plugins.protocols.rfcomm import rfcomm_fcs

    ap = argparse.ArgumentParser(description="Generate a small hex-lines HCI trace for offline demos.")
    ap.add_argument("--out", default="samples/sample_trace.hex")
    ap.add_argument("--mode", choices=["l2cap", "sdp", "rfcomm"], default="sdp")
    args = ap.parse_args()

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)

    mode = str(args.mode).lower()
    psm = 0x0003 if mode == "rfcomm" else 0x0001
    scid, dcid = 0x0040, 0x0041
    mtu_opt = bytes([0x01, 0x02]) + _u16(672)

    lines = [
        ("cmd", bytes.fromhex("030c00")),
        ("evt", bytes.fromhex("0e0401030c00")),
        ("acl", _acl(_signal(0x02, 1, _u16(psm) + _u16(scid)), 0x0001)),
        ("acl", _acl(_signal(0x03, 1, _u16(dcid) + _u16(scid) + _u16(0) + _u16(0)), 0x0001)),
        ("acl", _acl(_signal(0x04, 2, _u16(dcid) + _u16(0) + mtu_opt), 0x0001)),
        ("acl", _acl(_signal(0x05, 2, _u16(dcid) + _u16(0) + _u16(0) + mtu_opt), 0x0001)),
    ]
    if mode == "sdp":
        # SDP_ServiceSearchRequest for the Serial Port UUID
        params = b"\x35\x03\x19\x11\x01\x00\x10\x00"
        pdu = bytes([0x02]) + (0x1234).to_bytes(2, "big") + len(params).to_bytes(2, "big") + params
        lines.append(("acl", _acl(pdu, dcid)))
    elif mode == "rfcomm":
        # SABM on DLCI 0, then a UIH frame on DLCI 2
        lines.append(("acl", _acl(b"\x03\x3f\x01" + bytes([rfcomm_fcs(b"\x03\x3f\x01")]), dcid)))
        info = b"hcidissect"
        addr = ((2 << 2) | (1 << 1) | 0x01) & 0xFF  # DLCI=2, C/R=1, EA=1
        ctrl = 0xEF
        ln = ((len(info) & 0x7F) << 1) | 0x01
        lines.append(("acl", _acl(bytes([addr, ctrl, ln]) + info + bytes([rfcomm_fcs(bytes([addr, ctrl]))]), dcid)))
    else:
        lines.append(("acl", _acl(_signal(0x08, 3, b"ping"), 0x0001)))

    with out.open("w", encoding="utf-8", newline="\n") as f:
        f.write(f"# sample trace ({mode})\n")
        for kind, data in lines:
            f.write(f"{kind}: {data.hex(' ')}\n")
    print(str(out))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
