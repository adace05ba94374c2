"""
Export service: Purchase Order payloads and XML rendering.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from jinja2 import BaseLoader, Environment, FileSystemLoader

from models.purchase_order import PurchaseOrder
from models.supplier import Supplier
from orders.aggregator import line_total, order_summary

# Default XML export template
DEFAULT_EXPORT_XML_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<!--
  Purchase Order export template. Edit config/po_export_template.xml.j2 to customise.
  Template engine : Jinja2  (https://jinja.palletsprojects.com/)
  Values are XML-escaped automatically.  Use | safe only for trusted markup.

  Top-level variables available in every export:
    exported_at     ISO-8601 UTC timestamp
    purchase_order  dict: PO fields, lines list, shipments list
    summary         dict: line_count, total_uk, total_usa, total_units, grand_total, ...
    supplier        dict: supplier master record, or empty when unmatched
-->
{% set po = purchase_order %}
<PurchaseOrder id="{{ po.id }}">
  <Meta>
    <ExportedAt>{{ exported_at }}</ExportedAt>
    <SplitState>{{ summary.split_state }}</SplitState>
  </Meta>

  <Supplier>
    {% if supplier.id %}<Id>{{ supplier.id }}</Id>
    {% endif %}
    <Name>{{ supplier.name or po.supplier_name or '' }}</Name>
    {% if po.supplier_ref %}<Reference>{{ po.supplier_ref }}</Reference>
    {% endif %}
    {% if supplier.country_of_origin %}<Country>{{ supplier.country_of_origin }}</Country>
    {% endif %}
    {% if supplier.payment_terms %}<PaymentTerms>{{ supplier.payment_terms }}</PaymentTerms>
    {% endif %}
  </Supplier>

  <Details>
    {% if po.seasonality %}<Season>{{ po.seasonality }}</Season>
    {% endif %}
    <Currency>{{ po.currency }}</Currency>
    {% if po.ex_factory_date %}<ExFactoryDate>{{ po.ex_factory_date }}</ExFactoryDate>
    {% endif %}
    <TotalCostValue>{{ po.total_cost_value }}</TotalCostValue>
    <DepositCostValue>{{ po.deposit_cost_value }}</DepositCostValue>
    {% if po.deposit_payment_date %}<DepositPaymentDate>{{ po.deposit_payment_date }}</DepositPaymentDate>
    {% endif %}
    <GrandTotal>{{ summary.grand_total }}</GrandTotal>
    <Readiness skus="{{ po.skus_created | string | lower }}" barcodes="{{ po.barcodes_sent | string | lower }}" polybags="{{ po.polybags_sent | string | lower }}"/>
  </Details>

  {% if po.lines %}
  <Lines>
    {% for line in po.lines %}
    <Line number="{{ loop.index }}">
      <Product>{{ line.product_name }}</Product>
      <Size>{{ line.size }}</Size>
      {% if line.sku %}<SKU>{{ line.sku }}</SKU>
      {% endif %}
      {% if line.design_ref %}<DesignRef>{{ line.design_ref }}</DesignRef>
      {% endif %}
      {% if line.colour_code %}<Colour>{{ line.colour_code }}</Colour>
      {% endif %}
      <CostPrice>{{ line.cost_price }}</CostPrice>
      <QtyUK>{{ line.qty_uk }}</QtyUK>
      <QtyUSA>{{ line.qty_usa }}</QtyUSA>
      <LineTotal>{{ line.line_total }}</LineTotal>
    </Line>
    {% endfor %}
  </Lines>
  {% endif %}

  {% if po.shipments %}
  <Shipments>
    {% for sh in po.shipments %}
    <Shipment ref="{{ sh.shipment_ref }}" destination="{{ sh.destination }}" mode="{{ sh.mode }}">
      <Status>{{ sh.status }}</Status>
      <Units>{{ sh.units }}</Units>
      <Cartons>{{ sh.cartons }}</Cartons>
      {% if sh.freight_forwarder %}<FreightForwarder>{{ sh.freight_forwarder }}</FreightForwarder>
      {% endif %}
      {% if sh.eta %}<ETA>{{ sh.eta }}</ETA>
      {% endif %}
      {% if sh.tracking_number %}<Tracking>{{ sh.tracking_number }}</Tracking>
      {% endif %}
      {% if sh.import_tax_status %}<ImportTax>{{ sh.import_tax_status }}</ImportTax>
      {% endif %}
    </Shipment>
    {% endfor %}
  </Shipments>
  {% endif %}
</PurchaseOrder>
"""


def build_export_payload(po: PurchaseOrder, supplier: Optional[Supplier] = None) -> dict:
    """
    Template context for one PO.

    Line dicts gain a computed line_total; the summary is derived from the
    PO at export time and never stored.
    """
    data = po.model_dump(mode="json")
    for line_dict, line in zip(data["lines"], po.lines):
        line_dict["line_total"] = round(line_total(line), 2)
    return {
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "purchase_order": data,
        "summary": order_summary(po),
        "supplier": supplier.model_dump(mode="json") if supplier else {},
    }


def render_export_xml(payload: dict, template_file: Path | None = None) -> str:
    """
    Render *payload* as XML using the operator template (or built-in default).

    Args:
        payload: The export data dictionary
        template_file: Optional path to custom Jinja2 template file
    """
    if template_file and template_file.exists():
        env = Environment(
            loader=FileSystemLoader(str(template_file.parent)),
            autoescape=True,
            keep_trailing_newline=True,
        )
        tmpl = env.get_template(template_file.name)
    else:
        env = Environment(loader=BaseLoader(), autoescape=True, keep_trailing_newline=True)
        tmpl = env.from_string(DEFAULT_EXPORT_XML_TEMPLATE)
    return tmpl.render(**payload)
