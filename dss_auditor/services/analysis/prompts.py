# dss_auditor/services/analysis/prompts.py

COMPLIANCE_PROMPT = """
You are a refund compliance auditor.
Analyze this support ticket conversation and determine if the refund decision
was compliant with the provided DSS decision.

DSS Decision: {dss_decision}
Refund Amount: {refund_amount}
Customer Reason: {reason}

Conversation:
{conversation}

Provide:
1. COMPLIANT or NON-COMPLIANT
2. Brief explanation (2-3 sentences)
3. Key evidence from conversation

Format your response as JSON:
{{
  "status": "COMPLIANT" or "NON-COMPLIANT",
  "explanation": "...",
  "evidence": "..."
}}
"""

SUMMARY_PROMPT = """
Summarize this support ticket conversation in 2-3 sentences, focusing on:
- Customer's issue/complaint
- Agent's response and resolution
- Any commitments made

Conversation:
{conversation}
"""


def build_compliance_prompt(
    conversation: str,
    dss_decision: str,
    *,
    refund_amount: str = "",
    reason: str = "",
) -> str:
    return COMPLIANCE_PROMPT.format(
        dss_decision=dss_decision or "Not specified",
        refund_amount=refund_amount or "Unknown",
        reason=reason or "Not provided",
        conversation=conversation,
    )


def build_summary_prompt(conversation: str) -> str:
    return SUMMARY_PROMPT.format(conversation=conversation)
