"""Constants and prompt templates."""

# Free-text labels the AI backend tends to produce, keyed to the closed
# contract type values in schemas.ContractType.
CONTRACT_TYPE_ALIASES = {
    "employment": "Employment",
    "employee": "Employment",
    "offer letter": "Employment",
    "job offer": "Employment",
    "service": "Service",
    "services": "Service",
    "consulting": "Service",
    "independent contractor": "Service",
    "master service": "Service",
    "statement of work": "Service",
    "lease": "Lease",
    "rental": "Lease",
    "tenancy": "Lease",
    "equipment lease": "Lease",
    "nda": "NDA",
    "non-disclosure": "NDA",
    "non disclosure": "NDA",
    "nondisclosure": "NDA",
    "confidentiality": "NDA",
    "sales": "Sales",
    "sale": "Sales",
    "purchase": "Sales",
    "purchase order": "Sales",
    "supply": "Sales",
    "construction": "Construction",
    "subcontract": "Construction",
    "subcontractor": "Construction",
    "building": "Construction",
    "design-build": "Construction",
    "partnership": "Partnership",
    "joint venture": "Partnership",
    "other": "Other",
}

# Synonyms normalized onto the low / medium / high scale used for
# risk severity and opportunity impact.
LEVEL_ALIASES = {
    "low": "low",
    "minor": "low",
    "minimal": "low",
    "medium": "medium",
    "med": "medium",
    "moderate": "medium",
    "high": "high",
    "major": "high",
    "severe": "high",
    "critical": "high",
}

# Prompt templates
CONTRACT_TYPE_PROMPT_TEMPLATE = """
Analyze the following contract text and determine the type of contract it is.
Choose exactly one label from this list: {contract_types}.
If none of the labels fits, answer "Other".
Provide only the label as a single string. Do not include any additional explanation or text.

Contract text:
---
{contract_text}
---
"""

ANALYSIS_PROMPT_TEMPLATE = """
Analyze the following {contract_type} contract and provide a detailed analysis tailored to the provided content. Ensure your response reflects the specific clauses, terms, and context within the text, avoiding generic responses. Focus on identifying actionable insights, unique details, and contract-specific implications.

Provide:
1. A list of at least 10 potential risks for the party receiving the contract, each with a specific explanation based on the contract's terms, and severity level (low, medium, high).
2. A list of at least 10 potential opportunities or benefits for the receiving party, directly tied to the contract's provisions, each with a specific explanation and impact level (low, medium, high).
3. A comprehensive summary of the contract, including key terms and conditions explicitly mentioned in the text.
4. Recommendations for improving the contract from the receiving party's perspective, referencing specific clauses where possible.
5. A list of key clauses in the contract, directly extracted from the document.
6. An assessment of the contract's legal compliance, based on its adherence to standard practices and the governing law stated in the contract.
7. A list of potential negotiation points, focusing on areas that could be improved for the receiving party.
8. The contract duration or term, extracted directly from the contract text if applicable.
9. A summary of termination conditions, explicitly referencing the conditions stated in the contract.
10. A detailed breakdown of any financial terms or compensation structure, tied to the specific payment schedule or terms mentioned in the contract.
11. Any performance metrics or KPIs explicitly mentioned in the contract, if applicable.
12. A summary of specific clauses relevant to this type of contract (e.g., intellectual property for employment contracts, warranties for sales contracts), explicitly referencing their location in the text.
13. An overall score from 0 to 100, with 100 being the highest. This score should represent the contract's overall favorability based on the identified risks, opportunities, and terms.
14. The ISO 639-1 code of the language the contract is written in.

Format your response as a JSON object with the following structure:
{{
  "risks": [{{"description": "Risk description", "explanation": "Specific explanation based on the contract", "severity": "low|medium|high"}}],
  "opportunities": [{{"description": "Opportunity description", "explanation": "Specific explanation based on the contract", "impact": "low|medium|high"}}],
  "summary": "Comprehensive summary of the contract",
  "recommendations": ["Recommendation 1", "Recommendation 2"],
  "keyClauses": ["Clause 1", "Clause 2"],
  "legalCompliance": "Assessment of legal compliance",
  "negotiationPoints": ["Point 1", "Point 2"],
  "contractDuration": "Duration of the contract, if applicable",
  "terminationConditions": "Summary of termination conditions, if applicable",
  "financialTerms": {{
    "description": "Overview of financial terms",
    "details": ["Detail 1", "Detail 2"]
  }},
  "performanceMetrics": ["Metric 1", "Metric 2"],
  "specificClauses": "Summary of clauses specific to this contract type",
  "overallScore": 75,
  "language": "en"
}}

Use exactly the strings "low", "medium" or "high" for every "severity" and "impact" value.
"overallScore" must be a whole number between 0 and 100.

Important: Ensure your response reflects the specific content, details, and context of the provided contract. Do not provide generic or overly generalized information. Focus only on the contract details provided.
Important: Provide only the JSON object in your response, without any additional text or formatting.

Contract text:
---
{contract_text}
---
"""
