"""Core fractal math and raster types."""
