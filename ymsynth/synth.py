"""Register-level control of a six-channel, four-operator FM synthesiser chip."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional

MAX_FM_OPERATORS = 4
MAX_FM_CHANS = 6
FM_ALGORITHMS = 8

STEREO_MODE_CENTRE = 3
STEREO_MODE_RIGHT = 1
STEREO_MODE_LEFT = 2

MAX_VOLUME = 0x7F

_VOLUME_TO_TOTAL_LEVELS = (
    127, 122, 117, 113, 108, 104, 100, 97, 93, 89, 86, 83, 80, 77, 74, 71,
    68, 66, 63, 61, 58, 56, 54, 52, 50, 48, 46, 44, 43, 41, 40, 38, 37, 35,
    34, 32, 31, 30, 29, 28, 27, 26, 25, 24, 23, 22, 21, 20, 19, 19, 18, 17,
    17, 16, 15, 15, 14, 13, 13, 12, 12, 11, 11, 11, 10, 10, 9, 9, 9, 8, 8,
    7, 7, 7, 7, 6, 6, 6, 5, 5, 5, 5, 5, 4, 4, 4, 4, 4, 3, 3, 3, 3, 3, 3, 3,
    2, 2, 2, 2, 2, 2, 2, 2, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 0,
    0, 0, 0, 0, 0, 0, 0, 0, 0,
)

_REG_LFO = 0x22
_REG_CH3_MODE = 0x27
_REG_KEY_ON_OFF = 0x28

_REG_MULTIPLE_DETUNE = 0x30
_REG_TOTAL_LEVEL = 0x40
_REG_ATTACK_RATE_SCALING = 0x50
_REG_FIRST_DECAY_AM = 0x60
_REG_SECOND_DECAY = 0x70
_REG_RELEASE_SECONDARY_AMP = 0x80
_REG_SSG_EG = 0x90

_REG_FREQ_LOW = 0xA0
_REG_FREQ_HIGH_OCTAVE = 0xA4
_REG_ALGORITHM_FEEDBACK = 0xB0
_REG_STEREO_AMS_FMS = 0xB4

RegisterWriter = Callable[[int, int, int], None]
ParameterUpdatedCallback = Callable[[int, "ParameterUpdated"], None]


class ParameterUpdated(Enum):
    """What kind of parameter a change notification refers to."""

    CHANNEL = auto()
    LFO = auto()


@dataclass
class Operator:
    """Parameters of one FM operator."""

    multiple: int = 0
    detune: int = 0
    attack_rate: int = 0
    rate_scaling: int = 0
    first_decay_rate: int = 0
    amplitude_modulation: int = 0
    secondary_amplitude: int = 0
    secondary_decay_rate: int = 0
    release_rate: int = 0
    total_level: int = 0
    ssg_eg: int = 0


def _default_operators() -> List[Operator]:
    return [Operator() for _ in range(MAX_FM_OPERATORS)]


@dataclass
class FmChannel:
    """Parameters of one FM channel, including its four operators."""

    algorithm: int = 0
    feedback: int = 0
    stereo: int = 0
    ams: int = 0
    fms: int = 0
    octave: int = 0
    freq_number: int = 0
    operators: List[Operator] = field(default_factory=_default_operators)

    def __post_init__(self) -> None:
        if len(self.operators) != MAX_FM_OPERATORS:
            raise ValueError(
                f"an FM channel needs {MAX_FM_OPERATORS} operators, "
                f"got {len(self.operators)}"
            )

    def copy(self) -> "FmChannel":
        """Return an independent copy of this channel."""
        return copy.deepcopy(self)


@dataclass
class GlobalParameters:
    """Chip-wide parameters."""

    lfo_enable: int = 1
    lfo_frequency: int = 0


_OPERATOR_ENCODERS = {
    _REG_MULTIPLE_DETUNE: lambda o: o.multiple + (o.detune << 4),
    _REG_ATTACK_RATE_SCALING: lambda o: o.attack_rate + (o.rate_scaling << 6),
    _REG_FIRST_DECAY_AM: lambda o: o.first_decay_rate
    + (o.amplitude_modulation << 7),
    _REG_SECOND_DECAY: lambda o: o.secondary_decay_rate,
    _REG_RELEASE_SECONDARY_AMP: lambda o: o.release_rate
    + (o.secondary_amplitude << 4),
    _REG_SSG_EG: lambda o: o.ssg_eg,
}

_FIELD_REGISTERS = {
    "multiple": _REG_MULTIPLE_DETUNE,
    "detune": _REG_MULTIPLE_DETUNE,
    "attack_rate": _REG_ATTACK_RATE_SCALING,
    "rate_scaling": _REG_ATTACK_RATE_SCALING,
    "first_decay_rate": _REG_FIRST_DECAY_AM,
    "amplitude_modulation": _REG_FIRST_DECAY_AM,
    "secondary_decay_rate": _REG_SECOND_DECAY,
    "release_rate": _REG_RELEASE_SECONDARY_AMP,
    "secondary_amplitude": _REG_RELEASE_SECONDARY_AMP,
    "ssg_eg": _REG_SSG_EG,
}

# Order in which a whole channel's operator registers are rewritten.
_CHANNEL_UPDATE_ORDER = (
    _REG_MULTIPLE_DETUNE,
    _REG_ATTACK_RATE_SCALING,
    _REG_FIRST_DECAY_AM,
    _REG_SECOND_DECAY,
    _REG_RELEASE_SECONDARY_AMP,
    _REG_TOTAL_LEVEL,
    _REG_SSG_EG,
)


def is_output_operator(algorithm: int, op: int) -> bool:
    """Whether an operator is a carrier (output) in the given algorithm."""
    return (
        (algorithm < 4 and op == 3)
        or (algorithm == 4 and op in (2, 3))
        or (algorithm in (5, 6) and op > 0)
        or algorithm == 7
    )


def _register_operator_index(op: int) -> int:
    # Operators 2 and 3 sit in swapped register slots on the chip.
    return {1: 2, 2: 1}.get(op, op)


def _key_on_off_offset(channel: int) -> int:
    return channel if channel < 3 else channel + 1


class Synth:
    """State of the FM chip, written out through a register-writing callable.

    ``write_register(part, register, data)`` receives every chip write.
    """

    def __init__(self, write_register: RegisterWriter) -> None:
        self._write = write_register
        self._global = GlobalParameters()
        self._channels = [FmChannel() for _ in range(MAX_FM_CHANS)]
        self._volumes = [0] * MAX_FM_CHANS
        self._note_on = 0
        self._callback: Optional[ParameterUpdatedCallback] = None

    # -- public API ---------------------------------------------------------

    def init(self, initial_preset: FmChannel) -> None:
        """Reset every channel to full volume, key off and load the preset."""
        self._write(0, _REG_CH3_MODE, 0)
        for chan in range(MAX_FM_CHANS):
            self._volumes[chan] = MAX_VOLUME
            self.note_off(chan)
            self._channels[chan] = initial_preset.copy()
            self._update_channel(chan)
        self._update_global_lfo()

    def note_on(self, channel: int) -> None:
        self._check_channel(channel)
        self._write(0, _REG_KEY_ON_OFF, 0xF0 + _key_on_off_offset(channel))
        self._note_on |= 1 << channel

    def note_off(self, channel: int) -> None:
        self._check_channel(channel)
        self._write(0, _REG_KEY_ON_OFF, _key_on_off_offset(channel))
        self._note_on &= ~(1 << channel)

    def pitch(self, channel: int, octave: int, freq_number: int) -> None:
        chan = self._channel(channel)
        chan.octave = octave
        chan.freq_number = freq_number
        self._write_channel_reg(
            channel, _REG_FREQ_HIGH_OCTAVE, (freq_number >> 8) | (octave << 3)
        )
        self._write_channel_reg(channel, _REG_FREQ_LOW, freq_number)

    def volume(self, channel: int, volume: int) -> None:
        self._check_channel(channel)
        if not 0 <= volume <= MAX_VOLUME:
            raise ValueError(f"volume must be 0..{MAX_VOLUME}, got {volume}")
        if self._volumes[channel] == volume:
            return
        self._volumes[channel] = volume
        for op in range(MAX_FM_OPERATORS):
            self._update_operator_register(channel, op, _REG_TOTAL_LEVEL)

    def stereo(self, channel: int, stereo: int) -> None:
        self._channel(channel).stereo = stereo
        self._update_stereo_ams_fms(channel)
        self._channel_updated(channel)

    def algorithm(self, channel: int, algorithm: int) -> None:
        self._channel(channel).algorithm = algorithm
        self._update_algorithm_and_feedback(channel)
        self._channel_updated(channel)

    def feedback(self, channel: int, feedback: int) -> None:
        self._channel(channel).feedback = feedback
        self._update_algorithm_and_feedback(channel)
        self._channel_updated(channel)

    def operator_total_level(self, channel: int, op: int, total_level: int) -> None:
        oper = self._operator(channel, op)
        if oper.total_level == total_level:
            return
        oper.total_level = total_level
        self._update_operator_register(channel, op, _REG_TOTAL_LEVEL)
        self._channel_updated(channel)

    def operator_multiple(self, channel: int, op: int, multiple: int) -> None:
        self._set_operator_field(channel, op, "multiple", multiple)

    def operator_detune(self, channel: int, op: int, detune: int) -> None:
        self._set_operator_field(channel, op, "detune", detune)

    def operator_rate_scaling(self, channel: int, op: int, rate_scaling: int) -> None:
        self._set_operator_field(channel, op, "rate_scaling", rate_scaling)

    def operator_attack_rate(self, channel: int, op: int, attack_rate: int) -> None:
        self._set_operator_field(channel, op, "attack_rate", attack_rate)

    def operator_first_decay_rate(
        self, channel: int, op: int, first_decay_rate: int
    ) -> None:
        self._set_operator_field(channel, op, "first_decay_rate", first_decay_rate)

    def operator_second_decay_rate(
        self, channel: int, op: int, second_decay_rate: int
    ) -> None:
        self._set_operator_field(
            channel, op, "secondary_decay_rate", second_decay_rate
        )

    def operator_secondary_amplitude(
        self, channel: int, op: int, secondary_amplitude: int
    ) -> None:
        self._set_operator_field(
            channel, op, "secondary_amplitude", secondary_amplitude
        )

    def operator_amplitude_modulation(
        self, channel: int, op: int, amplitude_modulation: int
    ) -> None:
        self._set_operator_field(
            channel, op, "amplitude_modulation", amplitude_modulation
        )

    def operator_release_rate(self, channel: int, op: int, release_rate: int) -> None:
        self._set_operator_field(channel, op, "release_rate", release_rate)

    def operator_ssg_eg(self, channel: int, op: int, ssg_eg: int) -> None:
        self._set_operator_field(channel, op, "ssg_eg", ssg_eg)

    def enable_lfo(self, enable: int) -> None:
        self._global.lfo_enable = enable
        self._update_global_lfo()
        self._notify(0, ParameterUpdated.LFO)

    def global_lfo_frequency(self, freq: int) -> None:
        self._global.lfo_frequency = freq
        self._update_global_lfo()
        self._notify(0, ParameterUpdated.LFO)

    def ams(self, channel: int, ams: int) -> None:
        self._channel(channel).ams = ams
        self._update_stereo_ams_fms(channel)
        self._channel_updated(channel)

    def fms(self, channel: int, fms: int) -> None:
        self._channel(channel).fms = fms
        self._update_stereo_ams_fms(channel)
        self._channel_updated(channel)

    def busy(self) -> int:
        """Bit mask of channels that currently have a key on."""
        return self._note_on

    def preset(self, channel: int, preset: FmChannel) -> None:
        self._check_channel(channel)
        self._channels[channel] = preset.copy()
        self._update_channel(channel)
        self._channel_updated(channel)

    def channel_parameters(self, channel: int) -> FmChannel:
        """A snapshot of a channel's current parameters."""
        return self._channel(channel).copy()

    def global_parameters(self) -> GlobalParameters:
        """A snapshot of the chip-wide parameters."""
        return copy.copy(self._global)

    def set_parameter_updated_callback(
        self, callback: Optional[ParameterUpdatedCallback]
    ) -> None:
        self._callback = callback

    # -- internals ----------------------------------------------------------

    @staticmethod
    def _check_channel(channel: int) -> None:
        if not 0 <= channel < MAX_FM_CHANS:
            raise ValueError(f"FM channel must be 0..{MAX_FM_CHANS - 1}, got {channel}")

    def _channel(self, channel: int) -> FmChannel:
        self._check_channel(channel)
        return self._channels[channel]

    def _operator(self, channel: int, op: int) -> Operator:
        if not 0 <= op < MAX_FM_OPERATORS:
            raise ValueError(f"operator must be 0..{MAX_FM_OPERATORS - 1}, got {op}")
        return self._channel(channel).operators[op]

    def _notify(self, channel: int, kind: ParameterUpdated) -> None:
        if self._callback is not None:
            self._callback(channel, kind)

    def _channel_updated(self, channel: int) -> None:
        self._notify(channel, ParameterUpdated.CHANNEL)

    def _set_operator_field(self, channel: int, op: int, name: str, value: int) -> None:
        setattr(self._operator(channel, op), name, value)
        self._update_operator_register(channel, op, _FIELD_REGISTERS[name])
        self._channel_updated(channel)

    def _write_channel_reg(self, channel: int, base_reg: int, data: int) -> None:
        part = 1 if channel > 2 else 0
        self._write(part, base_reg + channel % 3, data & 0xFF)

    def _write_operator_reg(self, channel: int, op: int, base_reg: int, data: int) -> None:
        self._write_channel_reg(
            channel, base_reg + _register_operator_index(op) * 4, data
        )

    def _update_channel(self, channel: int) -> None:
        self._update_algorithm_and_feedback(channel)
        self._update_stereo_ams_fms(channel)
        for op in range(MAX_FM_OPERATORS):
            for reg in _CHANNEL_UPDATE_ORDER:
                self._update_operator_register(channel, op, reg)

    def _update_global_lfo(self) -> None:
        data = (self._global.lfo_enable << 3) | self._global.lfo_frequency
        self._write(0, _REG_LFO, data & 0xFF)

    def _update_algorithm_and_feedback(self, channel: int) -> None:
        chan = self._channels[channel]
        self._write_channel_reg(
            channel, _REG_ALGORITHM_FEEDBACK, (chan.feedback << 3) + chan.algorithm
        )

    def _update_stereo_ams_fms(self, channel: int) -> None:
        chan = self._channels[channel]
        self._write_channel_reg(
            channel,
            _REG_STEREO_AMS_FMS,
            (chan.stereo << 6) + (chan.ams << 4) + chan.fms,
        )

    def _update_operator_register(self, channel: int, op: int, base_reg: int) -> None:
        oper = self._channels[channel].operators[op]
        if base_reg == _REG_TOTAL_LEVEL:
            data = self._effective_total_level(channel, op, oper.total_level)
        else:
            data = _OPERATOR_ENCODERS[base_reg](oper)
        self._write_operator_reg(channel, op, base_reg, data)

    def _effective_total_level(self, channel: int, op: int, total_level: int) -> int:
        if is_output_operator(self._channels[channel].algorithm, op):
            return self._volume_adjusted_total_level(channel, total_level)
        return total_level

    def _volume_adjusted_total_level(self, channel: int, total_level: int) -> int:
        logarithmic_volume = 0x7F - _VOLUME_TO_TOTAL_LEVELS[self._volumes[channel]]
        inverse_total_level = (0x7F - total_level) & 0xFF
        inverse_new = (inverse_total_level * logarithmic_volume // 0x7F) & 0xFF
        return (0x7F - inverse_new) & 0xFF