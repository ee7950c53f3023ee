# Taskboard: boards, lists, categories, calendar, analytics and bento widgets
#
# Components:
#   schema.py    - Data model (Task, Column, Category, CustomList, TaskTemplate, Notification)
#   state.py     - Application, filter and selection state
#   views.py     - View composition: active columns, filtering, sorting, counts
#   commands.py  - Mutation layer: pure reducers returning CommandResult
#   store.py     - SQLite key/value persistence and state load/save
#   session.py   - Board session: dispatch, persistence, event subscribers
#   exporter.py  - JSON/CSV export and JSON import
#   analytics.py - Productivity statistics
#   calendar.py  - Month grid and tasks-by-date helpers
#   widgets.py   - Bento widget catalog and layout reducers
#   markdown.py  - Restricted markdown renderer for task descriptions
#   weather.py   - Weather + reverse-geocoding proxy client
#   config.py    - YAML/env configuration
#   errors.py    - Exception hierarchy
