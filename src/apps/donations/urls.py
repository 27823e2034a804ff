from django.urls import path

from apps.donations import views

urlpatterns = [
    path("donate", views.donate_endpoint, name="api-donate"),
    path("donations", views.donation_collection_endpoint, name="api-donations"),
    path("donations/stats", views.donation_stats_endpoint, name="api-donation-stats"),
    path("donations/<str:donation_id>", views.donation_delete_endpoint, name="api-donation-delete"),
]
