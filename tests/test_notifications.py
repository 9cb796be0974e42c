from datetime import date

from access_admin.services.notifications import REVIEW_CHECKLIST, format_short_date, render_reminder_email

TODAY = date(2024, 1, 31)


def test_subject_names_the_application():
    content = render_reminder_email("Payroll", "monthly", TODAY)
    assert content.subject == "Access Review Reminder: Payroll"


def test_payroll_monthly_content():
    content = render_reminder_email("Payroll", "monthly", TODAY)
    assert "Payroll" in content.subject
    assert "Payroll" in content.text_body
    assert "Payroll" in content.html_body
    assert "monthly" in content.text_body
    assert "monthly" in content.html_body


def test_text_body_is_exact_for_a_fixed_date():
    content = render_reminder_email("Payroll", "monthly", TODAY)
    assert content.text_body == (
        "Access Review Reminder\n"
        "\n"
        "Application: Payroll\n"
        "Reminder Frequency: monthly\n"
        "Date: 1/31/2024\n"
        "\n"
        "This is a scheduled reminder to review user access for the Payroll application.\n"
        "\n"
        "Please review:\n"
        "- Current user list and permissions\n"
        "- Remove any unnecessary access\n"
        "- Update user roles as needed\n"
        "- Verify admin permissions\n"
        "\n"
        "Best regards,\n"
        "Access Management System"
    )


def test_checklist_in_both_bodies():
    content = render_reminder_email("CRM", "weekly", TODAY)
    for item in REVIEW_CHECKLIST:
        assert item in content.text_body
        assert f"<li>{item}</li>" in content.html_body


def test_html_escapes_application_name():
    content = render_reminder_email("R&D <tools>", "weekly", TODAY)
    assert "R&amp;D &lt;tools&gt;" in content.html_body
    assert "<tools>" not in content.html_body
    assert content.subject == "Access Review Reminder: R&D <tools>"


def test_short_date_has_no_zero_padding():
    assert format_short_date(date(2024, 3, 5)) == "3/5/2024"
