from django.urls import path

from . import views

app_name = "member_dashboard"

urlpatterns = [
    # Catalog and section schemas
    path("api/catalog/<str:program_type>/", views.catalog_api, name="api_catalog"),
    path("api/schemas/<str:section_key>/", views.section_schema_api, name="api_section_schema"),
    # Configurator sessions
    path("api/sessions/", views.start_session_api, name="api_start_session"),
    path("api/sessions/<str:session_id>/", views.get_session_api, name="api_get_session"),
    path("api/sessions/<str:session_id>/delete/", views.delete_session_api, name="api_delete_session"),
    path("api/sessions/<str:session_id>/toggle/", views.toggle_section_api, name="api_toggle_section"),
    path("api/sessions/<str:session_id>/reorder/", views.reorder_sections_api, name="api_reorder_sections"),
    path("api/sessions/<str:session_id>/reset/", views.reset_sections_api, name="api_reset_sections"),
    path("api/sessions/<str:session_id>/config/", views.update_config_api, name="api_update_config"),
    path("api/sessions/<str:session_id>/step/", views.step_api, name="api_step"),
    path("api/sessions/<str:session_id>/publish/", views.publish_api, name="api_publish"),
]
