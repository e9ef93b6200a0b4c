from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserCreationForm as BaseUserCreationForm
from django.forms import ModelForm

from Turf.models import Turf

from .models import User


class UserCreationForm(BaseUserCreationForm):
    class Meta:
        model = User
        fields = ("email", "full_name", "phone_number", "role")


class UserChangeForm(ModelForm):
    class Meta:
        model = User
        fields = "__all__"


# Turfs a business user operates, read-only from the user screen
class OwnedTurfInline(admin.TabularInline):
    model = Turf
    fk_name = "owner"
    fields = ("name", "opening_time", "closing_time", "price", "is_active")
    readonly_fields = fields
    extra = 0
    can_delete = False
    show_change_link = True


# ----------------------------------
# PRINCIPALS (customer / business / admin)
# ----------------------------------
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    form = UserChangeForm
    add_form = UserCreationForm
    inlines = [OwnedTurfInline]

    list_display = ("email", "full_name", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "is_superuser")
    search_fields = ("email", "full_name", "phone_number")
    ordering = ("-created_at",)

    fieldsets = (
        (None, {"fields": ("email", "password", "role")}),
        ("Contact", {"fields": ("full_name", "phone_number")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_superuser", "groups")}),
        ("Activity", {"fields": ("last_login", "created_at")}),
    )
    readonly_fields = ("created_at", "last_login")

    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "full_name", "phone_number", "role", "password1", "password2"),
        }),
    )

    filter_horizontal = ("groups",)
