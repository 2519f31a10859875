# users/views.py
import logging

from django.contrib import messages
from django.contrib.auth import login, logout
from django.contrib.auth.mixins import LoginRequiredMixin
from django.contrib.auth.views import LoginView
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect
from django.urls import reverse_lazy
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View
from django.views.generic import CreateView, UpdateView

from .forms import CustomUserCreationForm, CustomAuthenticationForm, UserProfileForm
from .models import User


logger = logging.getLogger(__name__)


# -------------------------
# Registration & Auth
# -------------------------
class UserRegistrationView(CreateView):
    """Sign up and log straight in; the profile is the user row itself."""
    model = User
    form_class = CustomUserCreationForm
    template_name = "users/register.html"
    success_url = reverse_lazy("products:feed")

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            return redirect(self.success_url)
        return super().dispatch(request, *args, **kwargs)

    def form_valid(self, form):
        response = super().form_valid(form)
        user: User = self.object
        login(self.request, user, backend="django.contrib.auth.backends.ModelBackend")
        logger.info(f"[USERS] Registered {user.email} ({user.pk})")
        messages.success(self.request, f"Welcome, {user.nickname}!")
        return response


class CustomLoginView(LoginView):
    """Email + password login"""
    form_class = CustomAuthenticationForm
    template_name = "users/login.html"
    redirect_authenticated_user = True

    def get_success_url(self):
        next_url = self.request.POST.get("next") or self.request.GET.get("next")
        if next_url and url_has_allowed_host_and_scheme(
            next_url, allowed_hosts={self.request.get_host()}
        ):
            return next_url
        return reverse_lazy("products:feed")

    def form_valid(self, form):
        messages.success(self.request, f"Welcome back, {form.get_user().get_short_name()}!")
        return super().form_valid(form)

    def form_invalid(self, form):
        messages.error(self.request, "Invalid login credentials. Please try again.")
        logger.info("Failed login attempt for identifier: %s", form.data.get("username"))
        return super().form_invalid(form)


class UserLogoutView(View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        logout(request)
        messages.info(request, "You have been logged out.")
        return redirect("products:feed")


# -------------------------
# Profile management
# -------------------------
class UserProfileView(LoginRequiredMixin, UpdateView):
    """Edit nickname and avatar."""
    model = User
    form_class = UserProfileForm
    template_name = "users/profile.html"
    success_url = reverse_lazy("users:profile")

    def get_object(self, queryset=None):
        return self.request.user

    def form_valid(self, form):
        messages.success(self.request, "Profile updated successfully!")
        return super().form_valid(form)
