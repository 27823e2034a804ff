from django.urls import path

from apps.projects import views

urlpatterns = [
    path("projects", views.project_collection_endpoint, name="api-projects"),
    path("projects/<str:project_id>", views.project_detail_endpoint, name="api-project-detail"),
    path("projects/<str:project_id>/donations", views.project_donations_endpoint, name="api-project-donations"),
]
