"""Boundary to an external text-explanation service.

The service itself lives outside this package. Callers pass in a client
object with a ``generate(system_instruction, prompt)`` method returning
text; any failure of that client turns into a fixed fallback reply and
never reaches the simulation code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .arbitration import ArbitrationResult
from .converters import DualSlopeResult, LadderState, SARResult
from .spi import ClockMode
from .uart import char_code


class Protocol(Enum):
    UART = "UART"
    I2C = "I2C"
    SPI = "SPI"
    DAC = "DAC"
    ADC = "ADC"


EMPTY_REPLY = "I couldn't generate an explanation at this moment."
FALLBACK_REPLY = (
    "Sorry, the explanation service is unavailable right now. "
    "Check the service credentials or try again later."
)

_TOPICS = {
    Protocol.UART: "Asynchronous 8N1 framing: idle high, start bit low, 8 data bits LSB first, stop bit high.",
    Protocol.I2C: (
        "Open-drain SDA/SCL with pull-ups. Multi-master arbitration is wired-AND: a master that "
        "sends 1 but reads 0 has lost, releases SDA and keeps listening. The dominant 0 wins."
    ),
    Protocol.SPI: (
        "4-wire full duplex (MOSI, MISO, SCK, CS). CPOL sets the clock idle level, CPHA the "
        "sampling edge. Both shift registers exchange one bit per clock."
    ),
    Protocol.DAC: "R-2R ladder: U = Uref * D / 2^N, each bit switches its rung to Uref or ground.",
    Protocol.ADC: (
        "SAR: a comparator and DAC weigh bits MSB to LSB; the quantization error is below "
        "Ulsb = Uref / 2^N. Dual slope: integrate Ue for a fixed T1, de-integrate Uref for T2; "
        "Ue / Uref = T2 / T1, independent of R and C."
    ),
}


@dataclass(frozen=True)
class ExplanationRequest:
    protocol: Protocol
    context: str
    question: Optional[str] = None

    def prompt(self) -> str:
        if self.question:
            return f"Context: {self.context}\n\nUser Question: {self.question}"
        return f"Context: {self.context}\n\nExplain what is happening in the {self.protocol.value} simulation."


def system_instruction(protocol: Protocol) -> str:
    return (
        "You are an embedded systems engineer teaching serial protocols and data conversion.\n"
        f"Explain {protocol.value} concepts clearly in at most 2-3 sentences unless asked for detail, "
        "focusing on why and how the signals change.\n"
        f"Background: {_TOPICS[protocol]}"
    )


def describe_uart(char: str) -> str:
    return f"UART transmission of character '{char}' (ASCII {char_code(char)}). Protocol: 8N1."


def describe_i2c(address: int, data: int) -> str:
    return f"I2C write to 0x{address:02X}. Data: 0x{data:02X}."


def _master_name(index: int) -> str:
    if index < 26:
        return chr(ord("A") + index)
    return str(index + 1)


def describe_arbitration(result: ArbitrationResult) -> str:
    parts = ["I2C multi-master arbitration simulation."]
    for index, address in enumerate(result.addresses):
        name = _master_name(index)
        if address is None:
            parts.append(f"Master {name} is idle.")
            continue
        sent = f"Master {name} sends 0x{address:02X}"
        if result.lost_at[index] is not None:
            sent += f" and loses at A{result.lost_at[index]}"
        parts.append(sent + ".")
    winners = [_master_name(index) for index in result.winners]
    if result.tied:
        parts.append(f"Masters {', '.join(winners)} tie.")
    else:
        parts.append(f"Master {winners[0]} wins.")
    parts.append("Explain wired-AND logic and who wins.")
    return " ".join(parts)


def describe_spi(mosi: int, miso: int, mode: int) -> str:
    clock = ClockMode.from_mode(mode)
    return (
        f"SPI mode {clock.mode} transmission. CPOL={clock.cpol}, CPHA={clock.cpha}. "
        f"Master sending 0x{mosi:02X}, slave sending 0x{miso:02X}. Full-duplex 4-wire configuration."
    )


def describe_dac(state: LadderState) -> str:
    return f"DAC (R-2R ladder). Input: {state.code} of {state.resolution} bits, output {state.voltage:.3f} V."


def describe_sar(result: SARResult) -> str:
    return (
        f"ADC (SAR method). Resolution: {result.resolution}-bit. Input {result.input_voltage:.3f} V "
        f"converts to {result.binary}. Explaining successive approximation and quantization."
    )


def describe_dual_slope(result: DualSlopeResult) -> str:
    return (
        "ADC (dual slope method). Explaining integration phase (T1) and de-integration phase (T2). "
        f"T1={result.t1:g}, T2={result.t2:g}. T2/T1 = Ue/Uref. Independence from RC."
    )


def explain(client: Any, request: ExplanationRequest) -> str:
    """Ask `client` for an explanation; degrade to a fixed reply on failure."""
    try:
        text = client.generate(system_instruction(request.protocol), request.prompt())
    except Exception:  # noqa: BLE001
        return FALLBACK_REPLY
    return text or EMPTY_REPLY
