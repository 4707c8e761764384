"""Mini CRM back office: scheduled email delivery and user notifications."""
