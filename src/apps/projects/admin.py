from django.contrib import admin
from django.utils.html import format_html

from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "goal_amount",
        "current_amount",
        "progress_badge",
        "donation_count",
        "created_at",
    )
    search_fields = ("title", "description")
    list_filter = ("created_at",)
    # current_amount is owned by the aggregate updater.
    readonly_fields = ("id", "current_amount", "created_at", "updated_at")
    fieldsets = (
        ("Project", {
            "fields": ("id", "title", "description")
        }),
        ("Funding", {
            "fields": ("goal_amount", "current_amount")
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )
    ordering = ("-created_at",)

    def get_readonly_fields(self, request, obj=None):
        # The goal is fixed once the project exists.
        if obj is not None:
            return self.readonly_fields + ("goal_amount",)
        return self.readonly_fields

    def progress_badge(self, obj):
        color = "green" if obj.is_fully_funded else "orange"
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px;">{}%</span>',
            color,
            obj.progress_percentage,
        )
    progress_badge.short_description = "Progress"

    def donation_count(self, obj):
        return obj.donations.count()
    donation_count.short_description = "Donations"
