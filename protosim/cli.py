"""Command line interface for the protocol simulator."""

from __future__ import annotations

import argparse
from typing import Any

from .arbitration import ArbitrationError, arbitrate
from .converters import ConverterError, dual_slope_convert, ladder_state, sar_convert
from .i2c import generate_i2c
from .spi import ClockMode, generate_spi
from .uart import char_code, generate_uart
from .utils import format_sar_table, format_trace_table


DEFAULT_I2C_ADDRESS = 0x50
DEFAULT_I2C_DATA = 0xA5
DEFAULT_ARB_ADDRESS_A = 0x21
DEFAULT_ARB_ADDRESS_B = 0x25
DEFAULT_SPI_TX = 0xF0
DEFAULT_SPI_RX = 0x0F
DEFAULT_REFERENCE = 3.3
DEFAULT_RESOLUTION = 4


def parse_hex(text: str, default: int) -> int:
    """Parse hexadecimal text; unparsable or zero input gives `default`."""
    try:
        value = int(text, 16)
    except (TypeError, ValueError):
        return default
    return value or default


def _print_trace(args: argparse.Namespace, trace: Any, arbitration: Any = None) -> None:
    result = arbitration if arbitration is not None else trace
    if args.json:
        print(result.to_json())
        return
    if args.verbose:
        print(format_trace_table(trace, arbitration))
        print()
    print(f"Protocol: {trace.protocol}")
    print(f"Frames: {len(trace)}")
    print(f"Duration: {float(trace.total_duration):g} units")


def _uart_command(args: argparse.Namespace) -> int:
    trace = generate_uart(args.char)
    _print_trace(args, trace)
    if not args.json:
        code = char_code(args.char)
        print(f"Character: {args.char[0]!r} = 0x{code:02X} (LSB first {format(code, '08b')[::-1]})")
    return 0


def _i2c_command(args: argparse.Namespace) -> int:
    address = parse_hex(args.address, DEFAULT_I2C_ADDRESS)
    data = parse_hex(args.data, DEFAULT_I2C_DATA)
    trace = generate_i2c(address, data)
    _print_trace(args, trace)
    if not args.json:
        print(f"Write 0x{address & 0x7F:02X} <- 0x{data & 0xFF:02X}")
    return 0


def _arbitrate_command(args: argparse.Namespace) -> int:
    address_a = parse_hex(args.address_a, DEFAULT_ARB_ADDRESS_A)
    address_b = parse_hex(args.address_b, DEFAULT_ARB_ADDRESS_B)
    result = arbitrate(address_a, address_b)
    _print_trace(args, result.trace, result)
    if args.json:
        return 0
    names = ("A", "B")
    for i, lost_at in enumerate(result.lost_at):
        status = "active" if lost_at is None else f"lost at A{lost_at}"
        print(f"Master {names[i]} (0x{result.addresses[i]:02X}): {status}")
    if result.tied:
        print("Arbitration tied: both masters addressed the same slave")
    else:
        print(f"Winner: master {names[result.winners[0]]}")
    return 0


def _spi_command(args: argparse.Namespace) -> int:
    mosi = parse_hex(args.mosi, DEFAULT_SPI_TX)
    miso = parse_hex(args.miso, DEFAULT_SPI_RX)
    trace = generate_spi(mosi, miso, args.mode)
    _print_trace(args, trace)
    if not args.json:
        print(f"Clock: {ClockMode.from_mode(args.mode)}")
        print(f"MOSI 0x{mosi & 0xFF:02X}, MISO 0x{miso & 0xFF:02X}")
    return 0


def _dac_command(args: argparse.Namespace) -> int:
    state = ladder_state(args.code, args.vref, args.bits)
    if args.json:
        print(state.to_json())
        return 0
    print(f"Code: {state.code} of {(1 << state.resolution) - 1}")
    if args.verbose:
        for i in range(state.resolution - 1, -1, -1):
            print(f"  b{i}: {state.switches[i]}")
    print(f"Output: {state.voltage:.4f} V")
    return 0


def _sar_command(args: argparse.Namespace) -> int:
    result = sar_convert(args.vin, args.vref, args.bits)
    if args.json:
        print(result.to_json())
        return 0
    if args.verbose:
        print(format_sar_table(result))
        print()
    print(f"Code: {result.binary} ({result.code})")
    print(f"Estimate: {result.estimate:.4f} V")
    print(f"Quantization error: {result.quantization_error:.4f} V (LSB {result.lsb:.4f} V)")
    return 0


def _dual_slope_command(args: argparse.Namespace) -> int:
    result = dual_slope_convert(args.vin, args.vref, args.bits, t1=args.t1)
    if args.json:
        print(result.to_json())
        return 0
    if args.verbose:
        print(f"T1: {result.t1:g}")
        print(f"T2: {result.t2:g}")
        print(f"Integrator peak: {result.peak_ratio:.3f} of full scale")
        print()
    print(f"Code: {result.binary} ({result.code})")
    print(f"Estimate: {result.estimate:.4f} V")
    print(f"Quantization error: {result.quantization_error:.4f} V")
    return 0


def _run_command(args: argparse.Namespace) -> int:
    try:
        return args.func(args)
    except (ArbitrationError, ConverterError, ValueError) as exc:
        print(f"Error: {exc}")
        return 2


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--verbose", action="store_true", help="Print the per-frame or per-step table")
    parser.add_argument("--json", action="store_true", help="Output JSON")


def _add_converter_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--vref", type=float, default=DEFAULT_REFERENCE, help="Reference voltage")
    parser.add_argument("--bits", type=int, default=DEFAULT_RESOLUTION, help="Resolution in bits")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Signal traces for UART, I2C, SPI and ADC/DAC conversion")
    sub = parser.add_subparsers(dest="command", required=True)

    uart = sub.add_parser("uart", help="UART 8N1 frame of one character")
    uart.add_argument("char", nargs="?", default="A", help="Character to send")
    uart.set_defaults(func=_uart_command)

    i2c = sub.add_parser("i2c", help="I2C single-byte write")
    i2c.add_argument("--address", default=f"{DEFAULT_I2C_ADDRESS:X}", help="7-bit address (hex)")
    i2c.add_argument("--data", default=f"{DEFAULT_I2C_DATA:X}", help="Data byte (hex)")
    i2c.set_defaults(func=_i2c_command)

    arb = sub.add_parser("arbitrate", help="I2C two-master arbitration")
    arb.add_argument("--address_a", default=f"{DEFAULT_ARB_ADDRESS_A:X}", help="Master A address (hex)")
    arb.add_argument("--address_b", default=f"{DEFAULT_ARB_ADDRESS_B:X}", help="Master B address (hex)")
    arb.set_defaults(func=_arbitrate_command)

    spi = sub.add_parser("spi", help="SPI full-duplex byte exchange")
    spi.add_argument("--mosi", default=f"{DEFAULT_SPI_TX:X}", help="Controller-out byte (hex)")
    spi.add_argument("--miso", default=f"{DEFAULT_SPI_RX:X}", help="Peripheral-out byte (hex)")
    spi.add_argument("--mode", type=int, choices=range(4), default=0, help="SPI mode 0-3")
    spi.set_defaults(func=_spi_command)

    dac = sub.add_parser("dac", help="R-2R ladder DAC output")
    dac.add_argument("code", type=int, help="Digital input code")
    _add_converter_flags(dac)
    dac.set_defaults(func=_dac_command)

    sar = sub.add_parser("sar", help="Successive approximation ADC")
    sar.add_argument("--vin", type=float, default=DEFAULT_REFERENCE / 2, help="Input voltage")
    _add_converter_flags(sar)
    sar.set_defaults(func=_sar_command)

    dual = sub.add_parser("dual-slope", help="Dual-slope integrating ADC")
    dual.add_argument("--vin", type=float, default=DEFAULT_REFERENCE / 2, help="Input voltage")
    dual.add_argument("--t1", type=float, default=100.0, help="Fixed integration time T1")
    _add_converter_flags(dual)
    dual.set_defaults(func=_dual_slope_command)

    for command in (uart, i2c, arb, spi, dac, sar, dual):
        _add_output_flags(command)

    return parser


def main(argv: Any = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_command(args)


if __name__ == "__main__":
    raise SystemExit(main())
