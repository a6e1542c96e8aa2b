"""
End-to-end analysis pipelines driven by config/data.yaml and config/run.yaml.
"""
