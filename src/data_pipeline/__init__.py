"""Input loading for the saliency map pipeline.

Modules:
    - fixations: CSV fixation list → ordered list of FixationPoint
    - stimulus: Stimulus image file → uint8 (H, W, 3) raster

Both loaders are scoped acquisitions: the file is opened, read completely
and closed before any pipeline stage runs, including on malformed input.

Data-quality policy:
    - Malformed fixation records are skipped and counted, never raised
    - Missing or unreadable files are fatal (FileNotFoundError / OSError)
"""
