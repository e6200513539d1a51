"""Streamlit UI for the ROI Benchmark ranking dashboard."""

import tempfile
from datetime import datetime
from io import BytesIO
from pathlib import Path

import plotly.express as px
import plotly.graph_objects as go
import streamlit as st
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches

from roi_benchmark.analytics import TimeBasis
from roi_benchmark.exceptions import IngestionError
from roi_benchmark.ingestion import ComparisonFilters
from roi_benchmark.logging_config import setup_logging
from roi_benchmark.services import BenchmarkService

setup_logging(json_output=False)

# Page config
st.set_page_config(
    page_title="ROI Benchmark",
    page_icon="🏆",
    layout="wide",
)

# Custom CSS
st.markdown(
    """
    <style>
    .rank-card {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        padding: 1.5rem;
        border-radius: 0.5rem;
        color: white;
        text-align: center;
    }
    .rank-card h1 { color: white; margin: 0; font-size: 3rem; }
    .insight-green { background-color: #d4edda; border-left: 4px solid #28a745; padding: 1rem; margin: 0.5rem 0; }
    .insight-amber { background-color: #fff3cd; border-left: 4px solid #ffc107; padding: 1rem; margin: 0.5rem 0; }
    .insight-red { background-color: #f8d7da; border-left: 4px solid #dc3545; padding: 1rem; margin: 0.5rem 0; }
    </style>
    """,
    unsafe_allow_html=True,
)

TIME_BASIS_LABELS = {
    TimeBasis.DAILY: "Daily",
    TimeBasis.WEEKLY: "Weekly",
    TimeBasis.MONTHLY: "Monthly",
    TimeBasis.ALL: "All time",
}

SEVERITY_ICONS = {"green": "✅", "amber": "⚠️", "red": "🚨"}


def format_currency(n: float | None) -> str:
    if n is None:
        return "N/A"
    return f"${n:,.2f}"


def format_pct(n: float | None, decimals: int = 2) -> str:
    """Format percentage."""
    if n is None:
        return "N/A"
    return f"{n:.{decimals}f}%"


def render_insight(insight: dict) -> None:
    """Render a benchmark insight card with severity color."""
    severity = insight["severity"]
    icon = SEVERITY_ICONS[severity]
    is_spend = insight["metric"] == "spend"
    fmt = format_currency if insight["metric"] != "roi" else format_pct

    st.markdown(
        f"""
        <div class="insight-{severity}">
            <strong>{icon} {insight['metricName']}</strong> ({insight['label']})<br/>
            You: {fmt(insight['yourValue'])} &middot; Top: {fmt(insight['topValue'])}
            &middot; Average: {fmt(insight['averageValue'])}
            {'<br/><small>Lower spend for the same return is favorable.</small>' if is_spend else ''}<br/>
            <em>→ {insight['recommendation']}</em>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_campaign_insight(insight) -> None:
    """Render a campaign-vs-campaign insight."""
    severity = insight.severity.value
    st.markdown(
        f"""
        <div class="insight-{severity}">
            <strong>{SEVERITY_ICONS[severity]} {insight.rule_id.replace('_', ' ').title()}</strong><br/>
            {insight.description}<br/>
            <em>→ {insight.recommendation}</em>
        </div>
        """,
        unsafe_allow_html=True,
    )


def create_top_performers_chart(rankings: list, target_business_id: int) -> go.Figure:
    """Bar chart of the top five businesses by normalized ROI."""
    top5 = rankings[:5]
    colors = [
        "#f5576c" if r["businessId"] == target_business_id else "#667eea" for r in top5
    ]

    fig = go.Figure(data=[go.Bar(
        x=[r["businessName"] or f"Business {r['businessId']}" for r in top5],
        y=[r["normalizedROI"] for r in top5],
        marker_color=colors,
        text=[f"#{r['rank']}" for r in top5],
        textposition="outside",
    )])

    fig.update_layout(
        title="Top Performers by Normalized ROI",
        xaxis_title="Business",
        yaxis_title="Normalized ROI (%)",
        height=400,
        width=800,
        plot_bgcolor="white",
    )

    return fig


def fig_to_image(fig: go.Figure) -> BytesIO:
    """Convert Plotly figure to PNG image bytes."""
    img_bytes = fig.to_image(format="png", scale=2)
    return BytesIO(img_bytes)


def generate_docx(summary: dict, pack: dict) -> BytesIO:
    """Generate DOCX ranking report with chart and tables."""
    doc = Document()

    title = doc.add_heading("Your ROI Ranking", 0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    doc.add_paragraph(f"Business ID: {summary['targetBusinessId']}")
    doc.add_paragraph(f"Time basis: {TIME_BASIS_LABELS[TimeBasis(summary['timeBasis'])]}")
    doc.add_paragraph(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}")

    # Executive Summary
    doc.add_heading("Executive Summary", level=1)
    rankings = summary["rankings"]
    if summary["targetRank"] is None:
        doc.add_paragraph("This business has no campaigns in the selected comparison set.")
    else:
        top = summary["topPerformer"]
        doc.add_paragraph(
            f"Ranked #{summary['targetRank']} of {len(rankings)} businesses. "
            f"The top performer, {top['businessName'] or top['businessId']}, reached a "
            f"normalized ROI of {format_pct(top['normalizedROI'])}."
        )

    # Top performers chart
    if rankings:
        doc.add_heading("Top Performers", level=1)
        fig = create_top_performers_chart(rankings, summary["targetBusinessId"])
        doc.add_picture(fig_to_image(fig), width=Inches(6))

    # Ranking table
    doc.add_heading("Full Ranking", level=1)
    table = doc.add_table(rows=1, cols=6)
    table.style = "Table Grid"
    hdr = table.rows[0].cells
    for i, h in enumerate(["Rank", "Business", "Normalized ROI", "ROAS", "Revenue", "Cost"]):
        hdr[i].text = h

    for r in rankings:
        row = table.add_row().cells
        row[0].text = str(r["rank"])
        row[1].text = r["businessName"] or str(r["businessId"])
        row[2].text = format_pct(r["normalizedROI"])
        row[3].text = f"{r['normalizedROAS']:.2f}x"
        row[4].text = format_currency(r["totalRevenue"])
        row[5].text = format_currency(r["totalCost"])

    # Benchmark insights
    doc.add_heading("Benchmark Insights", level=1)
    for insight in summary["insights"]:
        icon = {"green": "✓", "amber": "⚠", "red": "✗"}[insight["severity"]]
        p = doc.add_paragraph()
        p.add_run(f"[{icon}] {insight['metricName']}: ").bold = True
        p.add_run(insight["label"])
        rec = doc.add_paragraph(f"    → {insight['recommendation']}")
        rec.paragraph_format.left_indent = Inches(0.5)

    if pack.get("meta", {}).get("filters"):
        doc.add_heading("Comparison Filters", level=2)
        for key, value in pack["meta"]["filters"].items():
            if value is not None:
                doc.add_paragraph(f"{key.replace('_', ' ').title()}: {value}")

    buffer = BytesIO()
    doc.save(buffer)
    buffer.seek(0)
    return buffer


def main():
    st.title("🏆 Your ROI Ranking")

    # Sidebar - File Upload
    with st.sidebar:
        st.header("📁 Upload Campaigns")

        campaign_file = st.file_uploader(
            "Campaign export (CSV, Excel or JSON)",
            type=["csv", "xlsx", "xls", "json"],
            help="One row per campaign with businessId, adMethodId, amountSpent, "
            "amountEarned, startDate and endDate",
        )

        st.divider()

    if not campaign_file:
        st.info("👈 Upload a campaign export to get started")
        return

    suffix = Path(campaign_file.name).suffix
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        tmp.write(campaign_file.getvalue())
        campaign_path = Path(tmp.name)

    service = BenchmarkService()

    try:
        df = service.pipeline.ingest(campaign_path)
    except (IngestionError, ValueError) as e:
        st.error(f"Error reading file: {e}")
        return

    businesses = service.get_available_businesses(df)
    if not businesses:
        st.error("No campaigns found in the uploaded file")
        return

    names = {b["business_id"]: b["business_name"] for b in businesses}
    business_types = sorted({b["business_type"] for b in businesses if b["business_type"]})
    ad_methods = sorted(df["ad_method_id"].unique().to_list())

    with st.sidebar:
        target_business_id = st.selectbox(
            "Your business",
            options=list(names),
            format_func=lambda x: names[x] or f"Business {x}",
        )

        st.subheader("Comparison set")
        business_type = st.selectbox("Business type", options=["All", *business_types])
        ad_method = st.selectbox("Ad method", options=["All", *ad_methods])
        use_radius = st.checkbox("Only nearby businesses")
        radius = st.number_input(
            "Radius (miles)",
            min_value=0.5,
            value=float(service.policy.default_radius_miles),
            step=0.5,
            disabled=not use_radius,
        )

        st.subheader("Normalization")
        time_basis = st.radio(
            "Time basis",
            options=list(TimeBasis),
            index=list(TimeBasis).index(service.policy.default_time_basis),
            format_func=lambda t: TIME_BASIS_LABELS[t],
            horizontal=True,
        )
        normalize = st.toggle("Normalize by campaign duration", value=service.policy.normalize)

    filters = ComparisonFilters(
        business_type=None if business_type == "All" else business_type,
        ad_method_id=None if ad_method == "All" else ad_method,
        radius_miles=radius if use_radius else None,
    )

    output = service.rank_frame(
        df,
        target_business_id=target_business_id,
        time_basis=time_basis,
        normalize=normalize,
        filters=filters,
    )
    summary = service.generate_summary_dict(output)
    pack = output.pack.to_dict() if output.pack else {}

    tab1, tab2, tab3, tab4 = st.tabs([
        "🏆 Your Ranking",
        "📋 Full Ranking",
        "🔍 Campaign Comparison",
        "📄 Generated Report",
    ])

    # =========================================================================
    # TAB 1: Your Ranking
    # =========================================================================
    with tab1:
        rankings = summary["rankings"]

        if summary["targetRank"] is None:
            st.warning(
                "Your business has no campaigns in this comparison set. "
                "Widen the filters to see a ranking."
            )
        else:
            col1, col2, col3 = st.columns(3)
            with col1:
                st.markdown(
                    f"""
                    <div class="rank-card">
                        Your rank<h1>#{summary['targetRank']}</h1>of {len(rankings)} businesses
                    </div>
                    """,
                    unsafe_allow_html=True,
                )
            target_row = next(r for r in rankings if r["businessId"] == target_business_id)
            with col2:
                st.metric("Your normalized ROI", format_pct(target_row["normalizedROI"]))
                st.metric("Your ROAS", f"{target_row['normalizedROAS']:.2f}x")
            with col3:
                top = summary["topPerformer"]
                st.metric(
                    "Top performer",
                    top["businessName"] or f"Business {top['businessId']}",
                )
                st.metric("Top normalized ROI", format_pct(top["normalizedROI"]))

        st.divider()

        if rankings:
            st.plotly_chart(
                create_top_performers_chart(rankings, target_business_id),
                use_container_width=True,
            )

        st.subheader("Benchmark Insights")
        if summary["insights"]:
            for insight in summary["insights"]:
                render_insight(insight)
        else:
            st.info("No insights for this comparison set")

    # =========================================================================
    # TAB 2: Full Ranking
    # =========================================================================
    with tab2:
        st.header("Full Ranking")

        if rankings:
            st.dataframe(
                rankings,
                use_container_width=True,
                hide_index=True,
                column_config={
                    "rank": "Rank",
                    "businessId": "Business ID",
                    "businessName": "Business",
                    "normalizedROI": st.column_config.NumberColumn("Normalized ROI %", format="%.2f%%"),
                    "normalizedROAS": st.column_config.NumberColumn("ROAS", format="%.2fx"),
                    "totalRevenue": st.column_config.NumberColumn("Revenue", format="$%.2f"),
                    "totalCost": st.column_config.NumberColumn("Cost", format="$%.2f"),
                    "campaignCount": st.column_config.NumberColumn("Campaigns", format="%d"),
                },
            )

            fig = px.scatter(
                x=[r["totalCost"] for r in rankings],
                y=[r["totalRevenue"] for r in rankings],
                hover_name=[r["businessName"] or str(r["businessId"]) for r in rankings],
                labels={"x": "Total cost ($)", "y": "Total revenue ($)"},
                title="Revenue vs. Cost",
            )
            fig.update_layout(height=400)
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No businesses match the selected filters")

    # =========================================================================
    # TAB 3: Campaign Comparison
    # =========================================================================
    with tab3:
        st.header("Campaign Comparison")

        campaigns = df.filter(df["campaign_id"].is_not_null())
        yours = campaigns.filter(campaigns["business_id"] == target_business_id)

        if yours.is_empty() or len(campaigns) < 2:
            st.info("Campaign comparison needs campaign ids in the upload")
        else:
            labels = {
                row["campaign_id"]: row["name"] or f"Campaign {row['campaign_id']}"
                for row in campaigns.iter_rows(named=True)
            }
            col1, col2 = st.columns(2)
            with col1:
                subject_id = st.selectbox(
                    "Your campaign",
                    options=yours["campaign_id"].to_list(),
                    format_func=lambda x: labels[x],
                )
            with col2:
                reference_id = st.selectbox(
                    "Compare with",
                    options=[cid for cid in labels if cid != subject_id],
                    format_func=lambda x: labels[x],
                )

            for insight in service.compare_campaigns(df, subject_id, reference_id, output.as_of):
                render_campaign_insight(insight)

    # =========================================================================
    # TAB 4: Generated Report
    # =========================================================================
    with tab4:
        st.header("Generated Report Preview")

        st.json(pack.get("ranking", {}), expanded=False)

        st.subheader("Recommendations")
        for text in pack.get("recommendations", []):
            st.write(f"• {text}")

        st.divider()

        st.subheader("Export Report")

        docx_buffer = generate_docx(summary, pack)

        st.download_button(
            label="📥 Download DOCX Report",
            data=docx_buffer,
            file_name=f"business_{target_business_id}_roi_ranking_{datetime.now().strftime('%Y%m%d')}.docx",
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            type="primary",
        )


if __name__ == "__main__":
    main()
