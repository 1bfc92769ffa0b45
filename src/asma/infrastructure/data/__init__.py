# Bundled datasets
