from shopcart.infrastructure.observability import MetricsCollector, RequestTimer


def test_metrics_collector_renders_core_series() -> None:
    collector = MetricsCollector()
    collector.record_http(method="get", path_group="cart", status_code=200, duration_ms=4.2)
    collector.record_http(method="POST", path_group="cart", status_code=409, duration_ms=320.4)
    collector.record_cart_mutation(operation="add_product", outcome="OUT_OF_STOCK", duration_ms=2.0)

    rendered = collector.render_prometheus()

    assert 'shopcart_http_requests_total{method="GET",path_group="cart",status="200"} 1' in rendered
    assert 'shopcart_http_requests_total{method="POST",path_group="cart",status="409"} 1' in rendered
    assert 'shopcart_http_request_duration_ms_sum{path_group="cart"} 324.6000' in rendered
    assert 'shopcart_http_request_duration_ms_count{path_group="cart"} 2' in rendered
    assert 'shopcart_cart_mutations_total{operation="add_product",outcome="OUT_OF_STOCK"} 1' in rendered
    assert 'shopcart_cart_mutation_duration_ms_count{operation="add_product"} 1' in rendered
    assert rendered.endswith("\n")
    assert collector.cart_mutation_count(operation="add_product", outcome="OUT_OF_STOCK") == 1
    assert collector.cart_mutation_count(operation="add_product", outcome="ok") == 0


def test_empty_collector_still_renders_series_headers() -> None:
    rendered = MetricsCollector().render_prometheus()

    assert "# TYPE shopcart_http_requests_total counter" in rendered
    assert "# TYPE shopcart_cart_mutation_duration_ms summary" in rendered


def test_request_timer_never_negative() -> None:
    assert RequestTimer.start().elapsed_ms() >= 0.0
