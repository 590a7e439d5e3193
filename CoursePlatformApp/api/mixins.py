from rest_framework.response import Response

class PaginationMixin:
    """Paginate a queryset with the view's paginator and render it with a read serializer."""

    def paginate_and_respond(self, queryset, serializer_cls):
        page = self.paginate_queryset(queryset)
        context = {"request": self.request}
        if page is not None:
            return self.get_paginated_response(serializer_cls(page, many=True, context=context).data)
        return Response(serializer_cls(queryset, many=True, context=context).data)
