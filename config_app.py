# ---------- SERVER CONFIG ---------- #

from audiohash import config

THRESHOLD = config.BER_THRESHOLD
BLOCK_SIZE = config.BLOCK_SIZE
TRANSFORM = config.SPECTRAL_TRANSFORM
# soundfile decodes these containers; mp3 needs libsndfile >= 1.1
ALLOWED_SUFFIXES = (".wav", ".flac", ".ogg", ".mp3", ".aiff", ".aif")
