"""docsmith -- write a document tree once, render it through many templates."""

__version__ = "0.3.0"
