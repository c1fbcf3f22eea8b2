"""Text-mode panel showing the FM parameters of the channel a MIDI channel plays on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ymsynth.synth import (
    FM_ALGORITHMS,
    MAX_FM_CHANS,
    MAX_FM_OPERATORS,
    FmChannel,
    GlobalParameters,
    Operator,
    ParameterUpdated,
    Synth,
)
from ymsynth.vstring import sprintf

MAX_Y = 27
MAX_X = 39
MARGIN_X = 1
MARGIN_Y = 1

MAX_EFFECTIVE_X = MAX_X - MARGIN_X - MARGIN_X
LOG_Y = 10
MAX_LOG_LINES = 14

BASE_Y = 7
OP_HEADING_X = 15
FM_HEADING_X = 0

_OP_VALUE_X = OP_HEADING_X + 4
_OP_VALUE_GAP = 4
_COL1_VALUE_X = FM_HEADING_X + 4
_COL2_VALUE_X = FM_HEADING_X + 11

_LFO_FREQ_TEXT = (
    "3.98Hz", "5.56Hz", "6.02Hz", "6.37Hz", "6.88Hz", "9.63Hz", "48.1Hz", "72.2Hz",
)
_AMS_TEXT = ("0dB   ", "1.4dB ", "5.9dB ", "11.8dB")
_FMS_TEXT = ("0%  ", "3.4%", "6.7%", "10% ", "14% ", "20% ", "40% ", "80% ")

_OPERATOR_HEADINGS = (
    ("Op.   1   2   3   4", 3),
    (" TL", 4),
    (" AR", 5),
    ("MUL", 6),
    (" DT", 7),
    (" RS", 8),
    (" AM", 9),
    ("D1R", 10),
    ("D2R", 11),
    (" SL", 12),
    (" RR", 13),
    ("SSG", 14),
)

_CHANNEL_HEADINGS = (
    ("MIDI", FM_HEADING_X, 3),
    ("FM", FM_HEADING_X + 8, 3),
    ("Alg", FM_HEADING_X, 5),
    ("Fb", FM_HEADING_X, 6),
    ("LFO", FM_HEADING_X, 9),
    ("AMS", FM_HEADING_X, 10),
    ("FMS", FM_HEADING_X, 11),
    ("Pan", FM_HEADING_X, 12),
)

# Operator field shown on each line of the operator table.
_OPERATOR_LINES = (
    ("total_level", 4),
    ("attack_rate", 5),
    ("multiple", 6),
    ("detune", 7),
    ("rate_scaling", 8),
    ("amplitude_modulation", 9),
    ("first_decay_rate", 10),
    ("secondary_decay_rate", 11),
    ("secondary_amplitude", 12),
    ("release_rate", 13),
    ("ssg_eg", 14),
)


def _lookup(table: Tuple[str, ...], index: int, what: str) -> str:
    if not 0 <= index < len(table):
        raise ValueError(f"{what} must be 0..{len(table) - 1}, got {index}")
    return table[index]


def stereo_text(stereo: int) -> str:
    """Two-character pan indicator for a stereo mode."""
    return {0: "  ", 1: "R ", 2: "L "}.get(stereo, "LR")


def lfo_enable_text(lfo_enable: int) -> str:
    """Three-character on/off text for the LFO enable flag."""
    return "Off" if lfo_enable == 0 else "On "


def lfo_freq_text(lfo_freq: int) -> str:
    """Frequency text for an LFO frequency setting."""
    return _lookup(_LFO_FREQ_TEXT, lfo_freq, "LFO frequency")


def ams_text(ams: int) -> str:
    """Amplitude modulation sensitivity in decibels."""
    return _lookup(_AMS_TEXT, ams, "AMS")


def fms_text(fms: int) -> str:
    """Frequency modulation sensitivity as a percentage."""
    return _lookup(_FMS_TEXT, fms, "FMS")


def _chan_number(chan: int) -> str:
    return sprintf("%-2d", chan + 1)


def _format_num(value: int) -> str:
    return sprintf("%d", value)


@dataclass
class ChannelMapping:
    """Which MIDI channel a device channel currently plays."""

    number: int
    midi_channel: int


class TextScreen:
    """A character grid addressed in absolute cell coordinates."""

    def __init__(self, width: int = MAX_X + 1, height: int = MAX_Y + 1) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"screen size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._cells: List[List[str]] = [[" "] * width for _ in range(height)]
        self.logs_visible = True

    def draw_text(self, text: str, x: int, y: int) -> None:
        """Write ``text`` starting at cell (x, y); cells off the screen are dropped."""
        if not 0 <= y < self.height:
            return
        row = self._cells[y]
        for column, char in enumerate(text, start=x):
            if 0 <= column < self.width:
                row[column] = char

    def clear_area(self, x: int, y: int, width: int, height: int) -> None:
        """Blank a rectangle of cells, clipped to the screen."""
        for row in self._cells[max(y, 0):max(y + height, 0)]:
            for column in range(max(x, 0), min(x + width, self.width)):
                row[column] = " "

    def row(self, y: int) -> str:
        """The text of screen row ``y``."""
        if not 0 <= y < self.height:
            raise IndexError(f"row must be 0..{self.height - 1}, got {y}")
        return "".join(self._cells[y])

    def show_logs(self) -> None:
        self.logs_visible = True

    def hide_logs(self) -> None:
        """Clear the log area and stop showing logs."""
        self.clear_area(MARGIN_X, LOG_Y + MARGIN_Y, MAX_EFFECTIVE_X, MAX_LOG_LINES)
        self.logs_visible = False


Mappings = Union[Sequence[ChannelMapping], Callable[[], Sequence[ChannelMapping]]]


class FmParameterPanel:
    """Shows the FM parameters of the channel bound to a chosen MIDI channel.

    Values are redrawn only when they change, or on the first update after
    the panel is shown.
    """

    def __init__(self, synth: Synth, screen: TextScreen, channel_mappings: Mappings) -> None:
        self._synth = synth
        self._screen = screen
        self._mappings = channel_mappings
        self._dirty = False
        self._show = False
        self._midi_chan = 0
        self._fm_chan = 0
        self._last_fm_chan = 0
        self._last_midi_chan = 0
        self._last_channel = FmChannel()
        self._last_global = GlobalParameters(lfo_enable=0, lfo_frequency=0)
        self._force_refresh = False
        self._visible_algorithm: Optional[int] = None
        synth.set_parameter_updated_callback(self._parameter_updated)

    @property
    def visible(self) -> bool:
        return self._show

    @property
    def algorithm_diagram(self) -> Optional[int]:
        """The algorithm whose diagram is shown, or None."""
        return self._visible_algorithm

    def update(self) -> None:
        """Redraw changed values if a channel is selected."""
        if not self._show:
            return
        chan = self._fm_chan_for_midi_chan(self._midi_chan)
        if chan is None:
            return
        if self._fm_chan != chan:
            self._fm_chan = chan
            self._dirty = True
        if self._dirty:
            self._update_values()
            self._dirty = False

    def set_parameters_visibility(self, chan: int, show: bool) -> None:
        """Show or hide the panel for MIDI channel ``chan``."""
        self._show = show
        self._midi_chan = chan
        if show:
            self._screen.hide_logs()
            self._force_refresh = True
            self._print_headings()
        else:
            self._screen.clear_area(0, MARGIN_Y + BASE_Y + 3, MAX_X, 12)
            self._visible_algorithm = None
            self._screen.show_logs()
        self._dirty = True

    # -- internals ----------------------------------------------------------

    def _parameter_updated(self, fm_chan: int, kind: ParameterUpdated) -> None:
        if fm_chan == self._fm_chan or kind is ParameterUpdated.LFO:
            self._dirty = True

    def _current_mappings(self) -> Sequence[ChannelMapping]:
        return self._mappings() if callable(self._mappings) else self._mappings

    def _fm_chan_for_midi_chan(self, midi_chan: int) -> Optional[int]:
        for mapping in self._current_mappings()[:MAX_FM_CHANS]:
            if mapping.midi_channel == midi_chan:
                return mapping.number
        return None

    def _draw(self, text: str, x: int, y: int) -> None:
        self._screen.draw_text(text, MARGIN_X + x, MARGIN_Y + y)

    def _print_headings(self) -> None:
        for text, line in _OPERATOR_HEADINGS:
            self._draw(text, OP_HEADING_X, BASE_Y + line)
        for text, x, line in _CHANNEL_HEADINGS:
            self._draw(text, x, BASE_Y + line)

    def _show_algorithm(self, algorithm: int) -> None:
        if not 0 <= algorithm < FM_ALGORITHMS:
            raise ValueError(f"algorithm must be 0..{FM_ALGORITHMS - 1}, got {algorithm}")
        self._visible_algorithm = algorithm

    def _refresh(self, last: object, name: str, current: int,
                 format_text: Callable[[int], str], x: int, y: int) -> bool:
        if getattr(last, name) != current or self._force_refresh:
            self._draw(format_text(current), x, y)
            setattr(last, name, current)
            return True
        return False

    def _update_values(self) -> None:
        channel = self._synth.channel_parameters(self._fm_chan)
        global_params = self._synth.global_parameters()
        row = BASE_Y

        if self._midi_chan != self._last_midi_chan or self._force_refresh:
            self._draw(_chan_number(self._midi_chan), _COL1_VALUE_X + 1, row + 3)
            self._last_midi_chan = self._midi_chan
        if self._fm_chan != self._last_fm_chan or self._force_refresh:
            self._draw(_chan_number(self._fm_chan), _COL2_VALUE_X, row + 3)
            self._last_fm_chan = self._fm_chan

        last = self._last_channel
        if self._refresh(last, "algorithm", channel.algorithm, _format_num,
                         _COL1_VALUE_X, row + 5):
            self._show_algorithm(channel.algorithm)
        self._refresh(last, "feedback", channel.feedback, _format_num,
                      _COL1_VALUE_X, row + 6)
        self._refresh(self._last_global, "lfo_enable", global_params.lfo_enable,
                      lfo_enable_text, _COL1_VALUE_X, row + 9)
        self._refresh(self._last_global, "lfo_frequency", global_params.lfo_frequency,
                      lfo_freq_text, _COL1_VALUE_X + 4, row + 9)
        self._refresh(last, "ams", channel.ams, ams_text, _COL1_VALUE_X, row + 10)
        self._refresh(last, "fms", channel.fms, fms_text, _COL1_VALUE_X, row + 11)
        self._refresh(last, "stereo", channel.stereo, stereo_text,
                      _COL1_VALUE_X, row + 12)
        self._update_operator_values(channel.operators)
        self._force_refresh = False

    def _update_operator_values(self, operators: Sequence[Operator]) -> None:
        for op in range(MAX_FM_OPERATORS):
            last = self._last_channel.operators[op]
            current = operators[op]
            x = _OP_VALUE_X + op * _OP_VALUE_GAP
            for name, line in _OPERATOR_LINES:
                self._refresh(last, name, getattr(current, name),
                              lambda value: sprintf("%3d", value), x, BASE_Y + line)