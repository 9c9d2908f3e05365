"""application - Use-case services built on domain ports."""
