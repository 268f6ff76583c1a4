"""PicVote: image polling with one vote per student ID and a voting deadline."""

__version__ = "0.1.0"
