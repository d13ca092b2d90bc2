# ---------- CONFIG ---------- #

from dataclasses import dataclass

# Audio Source: every sampling is decoded to mono float32 at this rate
TARGET_SR = 5536

# Filterbank: 33 Bark bands between 300 Hz and 2 kHz
NUMBER_OF_FILTERS = 33
BARK_WIDTH = 1.06
MIN_FREQUENCY = 300.0
MAX_FREQUENCY = 2000.0

# Framing: frames of 2048 samples overlapping by 31/32
# -> advance = 2048 / 32 = 64 samples (~11.6 ms @ 5536 Hz)
FRAME_LENGTH = 2048
OVERLAP_RATIO = 31 / 32

# Matcher: a block of 256 subfingerprints is ~3 seconds of audio
BER_THRESHOLD = 0.35
BLOCK_SIZE = 256

# Subfingerprints are 32 bit wide, one bit per pair of adjacent bands
BITS_PER_SUBFINGERPRINT = 32

SPECTRAL_TRANSFORM = "scipy"


class InvalidParametersError(ValueError):
    """Raised when a fingerprinting parameter set cannot be used."""


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def validate_filterbank_parameters(frame_length, sampling_rate, number_of_filters,
                                   bark_width, min_frequency, max_frequency) -> None:
    if int(frame_length) != frame_length or not _is_power_of_two(int(frame_length)):
        raise InvalidParametersError(
            f"frame_length must be a positive power of two, got {frame_length!r}")
    if sampling_rate <= 0:
        raise InvalidParametersError(f"sampling_rate must be positive, got {sampling_rate!r}")
    if int(number_of_filters) != number_of_filters or number_of_filters < 0:
        raise InvalidParametersError(
            f"number_of_filters must be a whole number of bands, got {number_of_filters!r}")
    if bark_width <= 0:
        raise InvalidParametersError(f"bark_width must be positive, got {bark_width!r}")
    if min_frequency < 0:
        raise InvalidParametersError(f"min_frequency must be >= 0, got {min_frequency!r}")
    if max_frequency <= min_frequency:
        raise InvalidParametersError(
            f"max_frequency ({max_frequency!r}) must be greater than min_frequency ({min_frequency!r})")


@dataclass(frozen=True)
class FingerprintParams:
    """
    Parameter set shared by fingerprint generation and matching.

    Two fingerprints are only comparable when they were generated with the
    same parameters and sampling rate.
    """
    frame_length: int = FRAME_LENGTH
    number_of_filters: int = NUMBER_OF_FILTERS
    bark_width: float = BARK_WIDTH
    min_frequency: float = MIN_FREQUENCY
    max_frequency: float = MAX_FREQUENCY

    def __post_init__(self):
        validate_filterbank_parameters(
            self.frame_length, TARGET_SR, self.number_of_filters,
            self.bark_width, self.min_frequency, self.max_frequency,
        )
        # one bit per pair of adjacent bands, packed into 32 bits
        if not 2 <= self.number_of_filters <= BITS_PER_SUBFINGERPRINT + 1:
            raise InvalidParametersError(
                f"number_of_filters must be between 2 and {BITS_PER_SUBFINGERPRINT + 1} "
                f"to form a subfingerprint, got {self.number_of_filters!r}")
        if self.frame_length < 32:
            raise InvalidParametersError(
                f"frame_length must be at least 32 samples, got {self.frame_length!r}")

    @property
    def overlap(self) -> int:
        return int(OVERLAP_RATIO * self.frame_length)

    @property
    def advance(self) -> int:
        return self.frame_length - self.overlap

    def number_of_subfingerprints(self, number_of_samples: int) -> int:
        """Length of the fingerprint produced for `number_of_samples` samples."""
        n = number_of_samples // self.advance - self.frame_length // self.advance + 1
        return max(0, n)
