"""Global constants for Chord Recognizer."""

# Pitch names (canonical sharp spelling, index = pitch class)
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NAMES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]
NUM_PITCH_CLASSES = 12

# Tuning
A4_FREQUENCY = 440.0
A4_MIDI = 69

# Audio processing defaults
DEFAULT_SR = 44100
DEFAULT_WINDOW_SIZE = 8192
DEFAULT_WINDOW_FUNCTION = "hann"
MIN_WINDOW_SIZE = 256
MAX_WINDOW_SIZE = 65536

# Peak picking defaults
DEFAULT_NOISE_FLOOR = 0.1  # fraction of the spectrum maximum
DEFAULT_MIN_SEPARATION_HZ = 10.0
DEFAULT_MAX_PEAKS = 12

# Profile defaults
DEFAULT_HARMONIC_DECAY = 0.5
DEFAULT_HARMONICS = (2, 3)
DEFAULT_MAX_DEVIATION = 0.5  # semitones

# Decision defaults
DEFAULT_TOP_K = 5
DEFAULT_HEURISTIC_WEIGHT = 0.5
DEFAULT_LEARNED_WEIGHT = 0.5

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127
PIANO_MIN = 21  # A0
PIANO_MAX = 108  # C8
