import pytest

from ymsynth.synth import FmChannel, Operator, Synth
from ymsynth.ui_fm import (
    BASE_Y,
    MARGIN_X,
    MARGIN_Y,
    ChannelMapping,
    FmParameterPanel,
    TextScreen,
    ams_text,
    fms_text,
    lfo_enable_text,
    lfo_freq_text,
    stereo_text,
)


def _row(screen, line):
    return screen.row(MARGIN_Y + BASE_Y + line)


def _cells(screen, line, x, width):
    start = MARGIN_X + x
    return _row(screen, line)[start:start + width]


@pytest.fixture
def setup():
    writes = []
    synth = Synth(lambda part, reg, data: writes.append((part, reg, data)))
    preset = FmChannel(
        algorithm=2,
        feedback=6,
        stereo=3,
        ams=1,
        fms=2,
        operators=[Operator(total_level=tl, attack_rate=31) for tl in (35, 40, 45, 10)],
    )
    synth.init(preset)
    mappings = [ChannelMapping(number=i, midi_channel=i) for i in range(6)]
    screen = TextScreen()
    panel = FmParameterPanel(synth, screen, mappings)
    return synth, screen, panel, mappings


def test_stereo_text():
    assert stereo_text(0) == "  "
    assert stereo_text(1) == "R "
    assert stereo_text(2) == "L "
    assert stereo_text(3) == "LR"


def test_lfo_enable_text():
    assert lfo_enable_text(0) == "Off"
    assert lfo_enable_text(1) == "On "


def test_lookup_texts():
    assert lfo_freq_text(0) == "3.98Hz"
    assert lfo_freq_text(7) == "72.2Hz"
    assert ams_text(3) == "11.8dB"
    assert fms_text(1) == "3.4%"


@pytest.mark.parametrize("func,value", [(lfo_freq_text, 8), (ams_text, 4), (fms_text, 8)])
def test_lookup_out_of_range(func, value):
    with pytest.raises(ValueError):
        func(value)


def test_screen_draw_and_clip():
    screen = TextScreen(5, 2)
    screen.draw_text("abcdefg", 2, 1)
    assert screen.row(1) == "  abc"
    screen.draw_text("zz", 0, 7)
    assert screen.row(0) == "     "
    with pytest.raises(IndexError):
        screen.row(2)


def test_screen_clear_area():
    screen = TextScreen(6, 3)
    for y in range(3):
        screen.draw_text("xxxxxx", 0, y)
    screen.clear_area(1, 1, 3, 5)
    assert screen.row(0) == "xxxxxx"
    assert screen.row(1) == "x   xx"
    assert screen.row(2) == "x   xx"


def test_screen_hide_and_show_logs():
    screen = TextScreen()
    screen.draw_text("log line", 1, 11)
    screen.hide_logs()
    assert not screen.logs_visible
    assert screen.row(11).strip() == ""
    screen.show_logs()
    assert screen.logs_visible


def test_hidden_panel_draws_nothing(setup):
    _, screen, panel, _ = setup
    before = [screen.row(y) for y in range(screen.height)]
    panel.update()
    assert [screen.row(y) for y in range(screen.height)] == before
    assert panel.algorithm_diagram is None


def test_show_draws_headings_and_values(setup):
    _, screen, panel, _ = setup
    panel.set_parameters_visibility(0, True)
    panel.update()
    assert _cells(screen, 3, 0, 4) == "MIDI"
    assert _cells(screen, 3, 15, 19) == "Op.   1   2   3   4"
    assert _cells(screen, 3, 5, 2) == "1 "
    assert _cells(screen, 3, 11, 2) == "1 "
    assert _cells(screen, 5, 4, 1) == "2"
    assert _cells(screen, 6, 4, 1) == "6"
    assert _cells(screen, 12, 4, 2) == "LR"
    assert _cells(screen, 11, 4, 4) == "6.7%"
    assert _cells(screen, 9, 4, 3) == "On "
    assert _cells(screen, 9, 8, 6) == "3.98Hz"
    assert _cells(screen, 5, 19, 3) == " 31"
    assert panel.algorithm_diagram == 2
    assert not screen.logs_visible


def test_operator_total_levels_in_columns(setup):
    _, screen, panel, _ = setup
    panel.set_parameters_visibility(0, True)
    panel.update()
    levels = [_cells(screen, 4, 19 + op * 4, 3) for op in range(4)]
    assert levels == [" 35", " 40", " 45", " 10"]


def test_parameter_change_on_selected_channel_redraws(setup):
    synth, screen, panel, _ = setup
    panel.set_parameters_visibility(0, True)
    panel.update()
    synth.algorithm(0, 5)
    panel.update()
    assert _cells(screen, 5, 4, 1) == "5"
    assert panel.algorithm_diagram == 5


def test_change_on_other_channel_does_not_redraw(setup):
    synth, screen, panel, _ = setup
    panel.set_parameters_visibility(0, True)
    panel.update()
    screen.draw_text("XX", MARGIN_X + 4, MARGIN_Y + BASE_Y + 6)
    synth.feedback(1, 3)
    panel.update()
    assert _cells(screen, 6, 4, 2) == "XX"


def test_lfo_change_redraws(setup):
    synth, screen, panel, _ = setup
    panel.set_parameters_visibility(0, True)
    panel.update()
    synth.global_lfo_frequency(7)
    panel.update()
    assert _cells(screen, 9, 8, 6) == "72.2Hz"


def test_follows_remapped_fm_channel(setup):
    synth, screen, panel, mappings = setup
    synth.algorithm(3, 7)
    mappings[0].midi_channel = 0x7F
    mappings[3].midi_channel = 0
    panel.set_parameters_visibility(0, True)
    panel.update()
    assert _cells(screen, 3, 11, 2) == "4 "
    assert panel.algorithm_diagram == 7


def test_unmapped_midi_channel_draws_no_values(setup):
    _, screen, panel, _ = setup
    panel.set_parameters_visibility(9, True)
    panel.update()
    assert _cells(screen, 5, 4, 1) == " "
    assert panel.algorithm_diagram is None


def test_hide_clears_panel(setup):
    _, screen, panel, _ = setup
    panel.set_parameters_visibility(0, True)
    panel.update()
    panel.set_parameters_visibility(0, False)
    assert not panel.visible
    assert panel.algorithm_diagram is None
    assert screen.logs_visible
    assert all(_row(screen, line).strip() == "" for line in range(3, 15))
    panel.update()
    assert _row(screen, 5).strip() == ""


def test_callable_mappings(setup):
    synth, screen, _, mappings = setup
    panel = FmParameterPanel(synth, screen, lambda: mappings)
    panel.set_parameters_visibility(1, True)
    panel.update()
    assert _cells(screen, 3, 5, 2) == "2 "
    assert _cells(screen, 3, 11, 2) == "2 "