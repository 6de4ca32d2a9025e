# reportcards/report/styles.py
from reportcards.report.formatting import fmt_number
from reportcards.report.template import ResolvedTemplate


def _watermark_css(t: ResolvedTemplate) -> str:
    if not t.show_watermark:
        return ""
    size = fmt_number(t.watermark_size)
    return f"""
    .watermark {{
      position: absolute;
      top: 50%;
      left: 50%;
      transform: translate(-50%, -50%);
      width: {size}px;
      height: {size}px;
      opacity: {fmt_number(t.watermark_opacity)};
      pointer-events: none;
      z-index: 0;
    }}
    .watermark img {{ width: 100%; height: 100%; object-fit: contain; }}
    .content {{ position: relative; z-index: 1; }}
"""


def _logo_css(cls: str, size: float, radius: str, start: str, end: str) -> str:
    px = fmt_number(size)
    return f"""
    .{cls} {{
      width: {px}px;
      height: {px}px;
      object-fit: contain;
      background: linear-gradient(135deg, {start}, {end});
      border-radius: {radius};
      display: flex;
      align-items: center;
      justify-content: center;
      font-size: 10px;
      color: white;
      font-weight: bold;
      box-shadow: 0 2px 6px rgba(0,0,0,0.1);
    }}
    .{cls} img {{ width: 100%; height: 100%; object-fit: contain; border-radius: {radius}; }}
"""


def build_stylesheet(t: ResolvedTemplate) -> str:
    primary = t.primary_color
    accent = t.accent_color
    zebra = "tr:nth-child(even) { background: #f9fafb; }" if t.zebra_rows else ""
    return f"""
    @page {{ size: {t.page_size}; margin: 8mm; }}
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    html {{ font-size: 11px; }}
    body {{ font-family: {t.font_family}; padding: 5mm; background: #fff; color: #000; }}
    .report-card {{
      width: 190mm;
      max-width: 190mm;
      margin: 0 auto;
      background: white;
      border-radius: 8px;
      overflow: hidden;
      position: relative;
      padding-bottom: 10px;
      font-size: 10px;
      page-break-inside: avoid;
    }}
    {_watermark_css(t)}
    .header-border {{ height: 5px; background: linear-gradient(90deg, {primary} 0%, {accent} 100%); }}
    .header {{
      display: flex;
      align-items: flex-start;
      justify-content: space-between;
      padding: 12px 15px;
      border-bottom: 2px solid {primary};
    }}
    {_logo_css("logo-left", t.left_logo_size, t.left_logo_radius, primary, accent)}
    {_logo_css("logo-right", t.right_logo_size, t.right_logo_radius, accent, primary)}
    .header-center {{ text-align: center; flex: 1; padding: 0 10px; }}
    .school-name {{
      color: {t.school_name_color};
      font-size: {fmt_number(t.school_name_font_size)}px;
      font-weight: 900;
      margin-bottom: 2px;
      letter-spacing: 0.5px;
    }}
    .subtitle {{ font-size: 9px; color: #555; font-weight: 600; margin: 1px 0; }}
    .contact-info {{ font-size: 8px; color: #666; margin: 1px 0; }}
    .session-badge {{
      display: inline-block;
      background: linear-gradient(135deg, {primary}, {accent});
      color: white;
      padding: 4px 12px;
      border-radius: 12px;
      font-weight: bold;
      font-size: 9px;
      margin-top: 5px;
    }}
    .content {{ padding: 12px 15px; }}
    .section-title {{
      font-size: 10px;
      font-weight: 800;
      color: white;
      background: linear-gradient(135deg, {primary}, {accent});
      margin: 10px -15px 8px;
      padding: 6px 15px;
      text-transform: uppercase;
      letter-spacing: 0.5px;
    }}
    .part-title {{
      font-size: 9px;
      font-weight: 700;
      color: {accent};
      margin: 8px 0 5px;
      padding-bottom: 3px;
      border-bottom: 1px solid {accent};
    }}
    .profile-grid {{
      display: grid;
      grid-template-columns: 1fr 1fr;
      gap: 4px 15px;
      margin-bottom: 8px;
      background: #f8f9fa;
      padding: 8px 10px;
      border-radius: 4px;
      border-left: 3px solid {primary};
    }}
    .profile-item {{ display: flex; gap: 5px; font-size: 9px; align-items: baseline; }}
    .profile-label {{ font-weight: 700; min-width: 90px; color: #555; }}
    .profile-value {{ color: #000; }}
    table {{ width: 100%; border-collapse: collapse; margin-bottom: 8px; font-size: 9px; }}
    th, td {{ border: 1px solid #ddd; padding: {t.cell_padding}; font-size: 9px; }}
    th {{
      background: {t.header_bg_color};
      font-weight: 700;
      text-align: left;
      color: #333;
      text-transform: uppercase;
      font-size: 8px;
      letter-spacing: 0.3px;
    }}
    th.overall {{ background: {accent}; color: white; }}
    td.center, th.center {{ text-align: center; }}
    .grade {{ color: {primary}; }}
    {zebra}
    .summary-box {{
      display: flex;
      gap: 20px;
      padding: 8px 15px;
      border-radius: 4px;
      margin: 8px 0;
      border: 1px solid {primary};
      align-items: center;
      justify-content: center;
    }}
    .summary-item {{ text-align: center; }}
    .summary-label {{ font-size: 8px; color: #666; font-weight: 600; text-transform: uppercase; }}
    .summary-value {{ font-size: 12px; font-weight: 800; color: {primary}; margin-top: 2px; }}
    .remarks-box {{
      background: #fffef7;
      border: 1px dashed {accent};
      border-radius: 4px;
      padding: 10px 12px;
      min-height: 50px;
      margin: 8px 0;
      position: relative;
    }}
    .remarks-label {{
      position: absolute;
      top: -8px;
      left: 10px;
      background: white;
      padding: 0 5px;
      font-weight: 700;
      font-size: 8px;
      color: {accent};
      text-transform: uppercase;
    }}
    .remarks-content {{ font-size: 9px; color: #333; font-style: italic; line-height: 1.5; }}
    .handwritten {{ margin-top: 8px; border-top: 1px dashed #ccc; padding-top: 5px; }}
    .handwritten-title {{ font-size: 7px; color: #666; margin-bottom: 3px; }}
    .handwritten-line {{ min-height: 12px; border-bottom: 1px solid #ddd; margin-bottom: 4px; }}
    .result-box {{
      display: flex;
      justify-content: space-between;
      align-items: center;
      border: 1px solid #28a745;
      border-radius: 4px;
      padding: 6px 12px;
      margin: 8px 0;
    }}
    .result-box.fail {{ border-color: #dc3545; }}
    .result-item {{ font-size: 9px; }}
    .result-label {{ font-weight: 700; color: #155724; }}
    .result-value {{ font-weight: 800; color: #28a745; font-size: 10px; }}
    .result-box.fail .result-value.pass-fail {{ color: #dc3545; }}
    .signatures {{
      display: flex;
      justify-content: space-around;
      margin-top: 20px;
      padding-top: 10px;
      border-top: 1px solid #e9ecef;
    }}
    .sig-block {{ text-align: center; }}
    .sig-line {{ width: 100px; border-bottom: 1px solid #333; margin: 25px auto 5px; }}
    .sig-name {{ font-size: 8px; color: #333; }}
    .sig-label {{ font-size: 8px; font-weight: 700; color: {primary}; text-transform: uppercase; }}
    .grade-scale {{
      margin-top: 10px;
      background: #f8f9fa;
      padding: 6px 8px;
      border-radius: 4px;
      border-left: 2px solid {accent};
    }}
    .grade-scale-title {{ font-size: 8px; font-weight: 700; color: {accent}; margin-bottom: 4px; text-transform: uppercase; }}
    .grade-scale-grid {{ display: flex; flex-wrap: wrap; gap: 3px; }}
    .grade-item {{
      background: white;
      border: 1px solid #dee2e6;
      border-radius: 2px;
      padding: 2px 5px;
      text-align: center;
      min-width: 35px;
    }}
    .grade-letter {{ font-size: 9px; font-weight: 700; color: {primary}; }}
    .grade-range {{ font-size: 7px; color: #666; }}
    .instructions {{
      margin-top: 10px;
      font-size: 8px;
      background: #fff3cd;
      border-left: 2px solid #ffc107;
      padding: 6px 10px;
      border-radius: 3px;
    }}
    .instructions strong {{ color: #856404; display: block; margin-bottom: 3px; font-size: 8px; }}
    .instructions-text {{ color: #856404; line-height: 1.4; }}
    @media print {{
      body {{ padding: 0; -webkit-print-color-adjust: exact; print-color-adjust: exact; }}
      .report-card {{ border-radius: 0; width: 194mm; max-width: 194mm; }}
    }}
"""
