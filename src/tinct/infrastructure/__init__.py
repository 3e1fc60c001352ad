"""Infrastructure — file I/O and the default colour-math capability."""
