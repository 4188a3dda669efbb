"""Generate JSON traces for a batch of protocol inputs."""

from __future__ import annotations

import argparse
from pathlib import Path

from protosim.arbitration import arbitrate
from protosim.i2c import generate_i2c
from protosim.spi import generate_spi
from protosim.uart import generate_uart


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--chars", default="AUZ", help="Characters to send over UART")
    ap.add_argument("--i2c", nargs="*", default=["50:A5", "3C:00"], help="I2C writes as ADDR:DATA (hex)")
    ap.add_argument("--arb", nargs="*", default=["21:25", "21:21"], help="Arbitration pairs as ADDR_A:ADDR_B (hex)")
    ap.add_argument("--spi", nargs="*", default=["F0:0F"], help="SPI exchanges as MOSI:MISO (hex), all modes")
    ap.add_argument("--outdir", default="artifacts", help="Output directory")
    args = ap.parse_args()

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    for char in args.chars:
        (outdir / f"uart_{ord(char):02X}.json").write_text(generate_uart(char).to_json())

    for pair in args.i2c:
        address, data = (int(x, 16) for x in pair.split(":"))
        (outdir / f"i2c_{address:02X}_{data:02X}.json").write_text(generate_i2c(address, data).to_json())

    for pair in args.arb:
        address_a, address_b = (int(x, 16) for x in pair.split(":"))
        result = arbitrate(address_a, address_b)
        (outdir / f"arb_{address_a:02X}_{address_b:02X}.json").write_text(result.to_json())

    for pair in args.spi:
        mosi, miso = (int(x, 16) for x in pair.split(":"))
        for mode in range(4):
            trace = generate_spi(mosi, miso, mode)
            (outdir / f"spi_{mosi:02X}_{miso:02X}_mode{mode}.json").write_text(trace.to_json())


if __name__ == "__main__":
    main()
