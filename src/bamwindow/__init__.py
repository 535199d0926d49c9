"""bamwindow: windowed, filtered, depth-capped access to BAM/CRAM alignments.

Most users want :class:`bamwindow.core.Sample` together with a variant from
:mod:`bamwindow.evidence`.
"""

__version__ = "0.1.0"
