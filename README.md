# voxsay

voxsay turns text into speech and writes it out as a 16-bit mono PCM WAV
file. The text can come from a file, from a single sentence given on the
command line, or from a regular file redirected to standard input. A long
text can be split into several parts, each ending on a whole sentence. The
parts are spoken one after another, each into its own temporary file, and
all parts are joined behind one WAV header at the end.

The speech itself comes from a backend that you supply: a list of voices
and a function that turns a piece of text into 16-bit samples.

## Installation

```
pip install .
```

## What the package does not do

voxsay contains no speech synthesizer and no installed voices. The
`voxin-say` command, run on its own, uses an empty `voxsay.tts.Backend`:
`voxin-say -L` lists no voices, and asking it to speak ends with an error
because no voice can be selected. To produce audio, call
`voxsay.cli.main` from Python with a backend of your own (see below).

Other limits:

- Text piped into standard input is not read; pass a file with `-f`, the
  text as an argument, or redirect standard input from a regular file.
- `-j` splits the text into parts, but the parts are spoken one after the
  other in the same process, not in parallel.

## Command line

```
voxin-say [OPTION]... [text]
```

A single positional argument is taken as the text to speak. With no text,
no `-f` and a terminal on standard input, the text "Hello World!" is used.

Options:

| Option    | Meaning                                                        |
|-----------|----------------------------------------------------------------|
| `-f FILE` | UTF-8 text file to read                                        |
| `-j NUM`  | number of parts, from 1 to 32 (texts under 256 bytes stay whole) |
| `-l NAME` | voice name or language code, for example `fr`                  |
| `-L`      | list the voices as `Name,Language,Variant` lines               |
| `-s NUM`  | speed in words per minute, converted to units as (NUM*2-140)/10 |
| `-S NUM`  | speed in engine units, clamped to 0..250                       |
| `-w FILE` | output WAV file; without it, standard output must be a regular file or a pipe |
| `-h`      | print help to standard error                                   |
| `-d`      | wait, printing a message every 5 seconds, until `voxsay.cli.debug_release` is set |

Errors are printed to standard error as `Error: ...` and `main` returns 1;
on success it returns 0.

Voice names are matched without regard to case against the voice name in
lower case followed by `-quality` when the voice has a quality, or against
its language code. When nothing matches, the first voice is used.

## Library use

```python
from voxsay.cli import main
from voxsay.tts import Backend
from voxsay.voxin import Voice


def silence(text, engine):
    # 100 silent samples per character
    return [0] * (100 * len(text))


voice = Voice.from_fields(id=0x10000, name="Plain", lang="en",
                          variant="US", rate=11025, size=16, charset="UTF-8")
backend = Backend([voice], silence)
main(["-w", "out.wav", "hello world"], backend=backend)
```

The pieces can also be used on their own:

- `voxsay.eci.Engine` queues text (`add_text`) and indexes
  (`insert_index`), keeps engine and voice parameters (`set_param`,
  `get_param`, `set_voice_param`, `get_voice_param`), and on
  `synthesize` and `synchronize` delivers waveform and index messages to the
  callback given to `register_callback`, in chunks of at most the size set
  by `set_output_buffer`.
- `voxsay.voxin.Voice` describes a voice; `Voice.from_fields` truncates
  strings to 127 characters and checks 32-bit numbers. `get_version()`
  returns `(1, 6, 4)`.
- `voxsay.textfile.TextFile` splits the input into parts and returns whole
  sentences from each part (`next_sentences`, `iter_sentences`);
  `search_last_sentence` gives the cut point inside a buffer.
- `voxsay.wavfile.WavFile` collects the audio of each part (`write_data`),
  then writes the header and all parts in order (`flush`).
  `WavHeader.pack` and `WavHeader.unpack` build and read the 44-byte header.
- `voxsay.tts.Tts` selects the voice and speed and speaks text into one part
  of a `WavFile` (`set_output`, `say`, `print_list`).
- `voxsay.cli.Speaker` runs these steps for every part (`say_part`, `say`).

## Debug log

Logging is off by default. To turn it on, create the file `libvoxin.ok` in
your home directory. Its first character sets the level: `0` for errors,
`1` for info, `2` for debug; an empty file means debug. The log is written to
`/tmp/voxin-say1.log.<thread id>`, with captured text in the same name
followed by `.txt`; both files can be read only by their owner.