# ymsynth

This package models the YM2612 FM sound chip at the register level. It keeps the
parameters of all six channels and their four operators. Each change becomes the
register writes the chip expects, and you supply the function that receives those
writes. The package also has a small printf-style formatter and a panel that draws
one channel's parameters onto a character grid.

The package has no third-party dependencies.

## Installation

```
pip install .
```

To also install the test suite's dependency (pytest):

```
pip install ".[test]"
```

## Driving the synthesizer (`ymsynth.synth`)

Give `Synth` a callable. It is called as `write_register(part, register, data)`
for every register write:

```python
from ymsynth.synth import Synth, FmChannel, Operator

writes = []
synth = Synth(lambda part, reg, data: writes.append((part, reg, data)))

preset = FmChannel(
    algorithm=2, feedback=6, stereo=3, ams=0, fms=0, octave=4, freq_number=0x284,
    operators=[Operator(total_level=30, attack_rate=31) for _ in range(4)],
)
synth.init(preset)          # every channel: full volume, key off, preset loaded

synth.pitch(0, 4, 0x284)
synth.note_on(0)
synth.volume(0, 100)        # 0..127; scales the output operators' total levels
synth.note_off(0)
```

- Channel parameters are changed with `algorithm`, `feedback`, `stereo`, `ams`
  and `fms`. Operator parameters are changed with `operator_total_level`,
  `operator_multiple`, `operator_detune`, `operator_rate_scaling`,
  `operator_attack_rate`, `operator_first_decay_rate`,
  `operator_second_decay_rate`, `operator_secondary_amplitude`,
  `operator_amplitude_modulation`, `operator_release_rate` and
  `operator_ssg_eg`.
- `enable_lfo` and `global_lfo_frequency` set the chip-wide LFO.
- `preset(channel, fm_channel)` loads a whole channel at once. The `FmChannel`
  is copied, not stored.
- `busy()` returns a bit mask with one bit set for each channel that has a key on.
- `channel_parameters(channel)` and `global_parameters()` return copies of the
  current state, as `FmChannel` and `GlobalParameters`.
- `set_parameter_updated_callback(callback)` registers a function that is called
  as `callback(channel, ParameterUpdated.CHANNEL)` after a channel parameter
  changes, or as `callback(0, ParameterUpdated.LFO)` after an LFO change. Pass
  `None` to remove the callback.
- `is_output_operator(algorithm, op)` tells you whether an operator is a carrier
  in a given algorithm. Channel volume affects only carriers.

Channel numbers outside 0..5, operator numbers outside 0..3 and volumes outside
0..127 raise `ValueError`.

## Formatting helpers (`ymsynth.vstring`)

```python
from ymsynth.vstring import sprintf, uint_to_str, int_to_str, int_to_hex

sprintf("%-5u|", 42)      # '42   |'
uint_to_str(7, 3)         # '007'
int_to_str(-12, 3)        # '-012'
int_to_hex(0xAB, 4)       # '00AB'
```

`sprintf` supports the conversions `c s p x X n u d i`, the flags `- + space 0`,
widths and precisions, including `*`. Its integer conversions work on 16-bit
values. Unknown conversions, `%%` among them, produce no output. `%n` appends the
number of characters written so far to the list you pass.

`uint_to_str` returns `">500000000"` for values above 500000000, and
`int_to_str` returns `"<-500000000"` for values below -500000000.

`fix32_to_str` and `fix16_to_str` format raw fixed-point values, which have 10
and 6 fractional bits.

## Parameter panel (`ymsynth.ui_fm`)

`FmParameterPanel` draws the parameters of the FM channel that is mapped to a
chosen MIDI channel onto a `TextScreen`. It redraws only the values that have
changed, except on the first update after it is shown, when it redraws them all.

```python
from ymsynth.ui_fm import TextScreen, FmParameterPanel, ChannelMapping

screen = TextScreen(40, 28)
mappings = [ChannelMapping(number=n, midi_channel=n) for n in range(6)]
panel = FmParameterPanel(synth, screen, mappings)

panel.set_parameters_visibility(0, True)
panel.update()
print(screen.row(10))
```

- `channel_mappings` can be a sequence of `ChannelMapping`, or a callable that
  returns one. Only the first six entries are searched.
- The panel registers its own parameter-updated callback on the `Synth`. That
  callback replaces any callback set before.
- Showing the panel clears the screen's log area and sets
  `screen.logs_visible` to false. Hiding the panel clears the panel area and sets
  it back to true.
- `panel.algorithm_diagram` gives the number of the algorithm whose diagram would
  be on display, or `None` when the panel is hidden.
- `stereo_text`, `lfo_enable_text`, `lfo_freq_text`, `ams_text` and `fms_text`
  give the labels the panel uses.

## What this package does not do

- It does not parse MIDI or route MIDI channels to FM channels. You supply the
  channel mappings yourself.
- It does not talk to sound hardware or emulate the chip's audio. Register writes
  go only to the callable you provide.
- The panel draws into an in-memory `TextScreen`. It does not render graphics or
  algorithm diagrams, and there is no command-line program.