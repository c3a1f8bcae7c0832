"""limnohub: filterable, exportable access to reservoir monitoring data."""
