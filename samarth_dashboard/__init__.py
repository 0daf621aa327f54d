"""
Samarth — district performance ingestion and analytics backend

Turns uploaded "Good Work Done" spreadsheets (CSV/XLSX) into per-district
metric documents and the derived statewide summary, insight report, and
monthly history the dashboard renders.

To swap the storage backend:
    DocumentStore works over any SQLAlchemy engine. Point
    SAMARTH_DATABASE_URL at Postgres (or any other dialect) and the
    collections and document shapes stay the same.

To connect a front end:
    Call dashboard.get_dashboard_overview(store) for a plain dict of the
    summary, insights, leaderboard, history, and zone breakdown.

To add a new metric:
    Add its header to config.NUMERIC_FIELDS. The normaliser, the district
    frame, and the leaderboard pick it up; extend kpis.compute_summary if it
    needs a statewide total.
"""
