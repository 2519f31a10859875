# products/views.py
import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST
from django.views.generic import FormView

from core.results import ErrorCode, http_status_for

from .forms import ProductForm, ProductStatusForm
from .services import ProductService

logger = logging.getLogger(__name__)


def product_feed(request):
    """Home page: latest listings still for sale"""
    context = {
        'products': ProductService.feed(),
    }
    return render(request, 'products/feed.html', context)


def product_detail(request, product_id):
    product = ProductService.get_detail(product_id, viewer=request.user)
    if product is None:
        raise Http404("Product not found")

    is_owner = request.user.is_authenticated and request.user.pk == product.owner_id
    context = {
        'product': product,
        'images': list(product.images.all()),
        'is_owner': is_owner,
        'is_favorited': ProductService.is_favorited(request.user, product),
        'status_form': ProductStatusForm(initial={'status': product.status}) if is_owner else None,
    }
    return render(request, 'products/detail.html', context)


class ProductCreateView(LoginRequiredMixin, FormView):
    form_class = ProductForm
    template_name = 'products/new.html'

    def form_valid(self, form):
        result = ProductService.create_listing(
            owner=self.request.user,
            title=form.cleaned_data['title'],
            price=form.cleaned_data['price'],
            description=form.cleaned_data.get('description'),
            location=form.cleaned_data.get('location'),
            images=form.cleaned_data.get('images'),
        )
        if not result['success']:
            form.add_error(None, result['error'])
            return self.form_invalid(form)

        if result['failed_uploads']:
            messages.warning(self.request, f"{result['failed_uploads']} image(s) could not be uploaded.")
        messages.success(self.request, "Your listing is live.")
        return redirect('products:detail', product_id=result['product'].pk)


@login_required
@require_POST
def toggle_favorite(request, product_id):
    result = ProductService.toggle_favorite(request.user, product_id)
    if request.headers.get('x-requested-with') == 'XMLHttpRequest':
        if not result['success']:
            return JsonResponse({'error': result['error']}, status=http_status_for(result))
        return JsonResponse({'favorited': result['favorited']})

    if not result['success']:
        messages.error(request, result['error'])
        return redirect('products:feed')
    return redirect('products:detail', product_id=product_id)


@login_required
@require_POST
def update_status(request, product_id):
    form = ProductStatusForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Unknown status.")
        return redirect('products:detail', product_id=product_id)

    result = ProductService.update_status(request.user, product_id, form.cleaned_data['status'])
    if not result['success']:
        if result['code'] == ErrorCode.NOT_FOUND:
            raise Http404(result['error'])
        messages.error(request, result['error'])
    else:
        messages.success(request, f"Marked as {result['product'].status_label}.")
    return redirect('products:detail', product_id=product_id)
