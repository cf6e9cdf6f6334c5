"""
Settings package for task_timeouts project.

Select a module with DJANGO_SETTINGS_MODULE:
- config.settings.development (default in manage.py)
- config.settings.production
- config.settings.test (pytest)
"""
