"""Local front-end for the voxlate translator."""
