"""
Shipping Eligibility Dashboard
==============================

Streamlit page for ad-hoc package lookups against the rule table.

Run with:
    streamlit run eligibility/dashboard/Eligibility.py
"""

import plotly.graph_objects as go
import polars as pl
import streamlit as st

from eligibility.aggregate import eligible_services
from eligibility.data import load_rule_table
from eligibility.dimensions import girth, length_plus_girth, standard_sum
from eligibility.errors import InvalidPackageError
from eligibility.evaluate import failed_checks
from eligibility.model import Package, RuleTable

# =============================================================================
# PAGE CONFIG
# =============================================================================

st.set_page_config(
    page_title="Shipping Service Eligibility",
    page_icon="📦",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_rule_table() -> RuleTable:
    return load_rule_table()


table = get_rule_table()

# =============================================================================
# SIDEBAR INPUTS
# =============================================================================

st.sidebar.title("Package")
st.sidebar.markdown("---")

length = st.sidebar.number_input("Length (mm)", min_value=0.0, value=300.0, step=10.0)
width = st.sidebar.number_input("Width (mm)", min_value=0.0, value=200.0, step=10.0)
height = st.sidebar.number_input("Height (mm)", min_value=0.0, value=100.0, step=10.0)
weight = st.sidebar.number_input("Weight (g)", min_value=0.0, value=1000.0, step=100.0)

carriers = st.sidebar.multiselect("Carriers", options=list(table.carriers), default=list(table.carriers))

st.sidebar.markdown("---")
st.sidebar.metric("Services in table", f"{len(table.service_ids):,}")

# =============================================================================
# RESULTS
# =============================================================================

st.title("Shipping Service Eligibility")

try:
    pkg = Package(weight_g=weight, length_mm=length, width_mm=width, height_mm=height)
except InvalidPackageError as e:
    st.error(str(e))
    st.stop()

subset = RuleTable(r for r in table if r.carrier in carriers)
result = eligible_services(pkg, subset)

col1, col2, col3, col4 = st.columns(4)
col1.metric("Eligible services", f"{len(result)} / {len(subset.service_ids)}")
col2.metric("Girth", f"{girth(pkg):,.0f} mm")
col3.metric("Length + girth", f"{length_plus_girth(pkg):,.0f} mm")
col4.metric("Standard sum", f"{standard_sum(pkg):,.0f} mm")

st.markdown("---")

if not result:
    st.info("No service accepts this package.")
else:
    by_carrier = (
        result.to_frame()
        .group_by("carrier")
        .len()
        .sort("len", descending=True)
    )
    x_vals = by_carrier["len"].to_list()
    fig = go.Figure(go.Bar(
        x=x_vals,
        y=by_carrier["carrier"].to_list(),
        orientation="h",
        marker_color="#3498db",
        text=[f"{v:,}" for v in x_vals],
        textposition="outside",
        cliponaxis=False,
    ))
    fig.update_layout(
        title="Eligible Services by Carrier",
        xaxis_title="Services",
        height=300,
        margin=dict(l=10, r=10, t=40, b=10),
    )
    st.plotly_chart(fig, use_container_width=True)

    st.subheader("Eligible")
    st.dataframe(
        result.to_frame().with_columns(pl.col("validation_types").list.join(", ")),
        use_container_width=True,
        hide_index=True,
    )

with st.expander("Rejected services"):
    rows = []
    for service in subset.services():
        if service.service_id in result:
            continue
        reasons = sorted({
            name
            for rule in service.rules
            for name in failed_checks(pkg, rule.constraints)
        })
        rows.append({
            "service_id": service.service_id,
            "service_name": service.service_name,
            "carrier": service.carrier,
            "failed_checks": ", ".join(reasons),
        })
    if rows:
        st.dataframe(pl.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("None")
