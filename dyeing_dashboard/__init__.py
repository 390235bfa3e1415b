"""
Dyeing Operations Dashboard

Analytics backend for daily dyeing production, RFT quality and shift
performance reports for the Lantabur and Taqwa units.

To swap the record store:
    Implement loaders.store.RecordStore (get/set/remove/subscribe) for the
    new backend and hand it to repository.DashboardRepository. Aggregation
    functions only ever see plain record lists.

To connect a front end:
    Call the dashboard.get_* functions with the loaded record lists; each
    returns plain dicts or DataFrames for cards, charts and tables.

To add a colour category:
    Append it to config.COLOR_GROUP_NAMES, and add an entry to
    config.CATEGORY_ALIASES if reports spell it more than one way.
"""
