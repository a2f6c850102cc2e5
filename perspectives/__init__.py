"""
Places & Perspectives — globe clustering and camera interaction core.

Entry point: python -m perspectives

Provides:
- Geo-tagged entries and great-circle clustering (geo/)
- Zoom-adaptive cluster thresholds and lazy reclustering (geo.zoom_policy)
- Cluster selection / drill-down decisions (gui.selection, gui.drilldown)
- Auto-rotating camera with pause/resume on interaction (gui.motion)
- Qt frame loop and event translation (gui.rotation_driver)
- Perspective feed clients (ingest/)
"""
